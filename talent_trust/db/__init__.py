"""
Talent Trust - Database Package
Re-exports for convenience.
"""
from talent_trust.db.neo4j import get_driver, get_session, init_schema, close
from talent_trust.db.repositories import Neo4jTalentStore, Neo4jAuditSink
