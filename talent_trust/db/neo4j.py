"""
Talent Trust - Graph connection

One driver per process for the marketplace graph. The engine reads talent
activity (:Project, :Review, :AuditLog flags, :User roles) and writes two
things back: the trust score fields on :Talent and :AuditLog entries.

Store calls open a short session each through get_session(); the driver
pools the underlying connections.
"""
from contextlib import contextmanager
from typing import Iterator

from neo4j import Driver, GraphDatabase, Session
import structlog

from talent_trust.config import get_settings

logger = structlog.get_logger()

_driver = None


def get_driver() -> Driver:
    """Driver for NEO4J_URI, created on first use."""
    global _driver
    if _driver is None:
        settings = get_settings()
        _driver = GraphDatabase.driver(
            settings.NEO4J_URI,
            auth=(settings.NEO4J_USER, settings.NEO4J_PASSWORD),
        )
        logger.info("trust_graph_connected", uri=settings.NEO4J_URI)
    return _driver


@contextmanager
def get_session() -> Iterator[Session]:
    """Session scoped to a single store call."""
    session = get_driver().session()
    try:
        yield session
    finally:
        session.close()


# Talent and user ids are looked up on every request; the score index backs
# the low-trust count on the stats endpoint.
CONSTRAINTS = [
    "CREATE CONSTRAINT IF NOT EXISTS FOR (t:Talent) REQUIRE t.id IS UNIQUE",
    "CREATE CONSTRAINT IF NOT EXISTS FOR (u:User) REQUIRE u.id IS UNIQUE",
    "CREATE CONSTRAINT IF NOT EXISTS FOR (p:Project) REQUIRE p.id IS UNIQUE",
    "CREATE CONSTRAINT IF NOT EXISTS FOR (a:AuditLog) REQUIRE a.audit_id IS UNIQUE",
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS FOR (p:Project) ON (p.talent_id)",
    "CREATE INDEX IF NOT EXISTS FOR (p:Project) ON (p.status)",
    "CREATE INDEX IF NOT EXISTS FOR (r:Review) ON (r.project_id)",
    "CREATE INDEX IF NOT EXISTS FOR (a:AuditLog) ON (a.entity_id, a.action)",
    "CREATE INDEX IF NOT EXISTS FOR (t:Talent) ON (t.trust_score)",
]


def init_schema():
    """
    Create the constraints and indexes the trust queries rely on.

    Idempotent. A statement the server rejects (older Neo4j, missing
    privileges) is logged and skipped so the API can still start.
    """
    with get_session() as session:
        for query in CONSTRAINTS + INDEXES:
            try:
                session.run(query)
            except Exception as e:
                logger.warning("trust_schema_statement_failed", query=query[:60], error=str(e))

    logger.info("trust_schema_ready", constraints=len(CONSTRAINTS), indexes=len(INDEXES))


def close():
    """Release the driver at shutdown. get_driver() reconnects if called again."""
    global _driver
    if _driver is not None:
        _driver.close()
        _driver = None
        logger.info("trust_graph_disconnected")
