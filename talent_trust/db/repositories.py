"""
Talent Trust - Neo4j Store

Concrete TalentStore and AuditSink over the marketplace graph.

Schema:
    (:Talent {
        id,
        trust_score,             # 0-100, null until first computed
        trust_score_factors,     # JSON object, camelCase factor keys
        trust_score_updated_at   # ISO-8601
    })
    (:Project {id, talent_id, client_id, status, deadline,
               created_at, first_response_at})
    (:Review {project_id, rating})          # rating 1-5
    (:AuditLog {audit_id, admin_id, action, entity_type, entity_id,
                details, created_at})
    (:User {id, user_role})

Errors are not caught here. The aggregator decides which reads may degrade;
writes always propagate.

Dependencies: neo4j >= 5.17.0
"""
import json
from typing import Any, Callable, Dict, List, Optional

import structlog

from talent_trust.db.neo4j import get_session
from talent_trust.trust.engine import TrustFactors
from talent_trust.trust.store import (
    ACTION_FLAG_TALENT,
    POSITIVE_RATING_MIN,
    AuditEntry,
    AuditSink,
    TalentStore,
    TrustScoreRecord,
)

logger = structlog.get_logger()


# Server-side procedures, by name. Each takes $talent_id and returns one
# `value` column (null when there is no data).
PROCEDURES: Dict[str, str] = {
    "get_talent_avg_response_time": """
        MATCH (p:Project {talent_id: $talent_id})
        WHERE p.created_at IS NOT NULL AND p.first_response_at IS NOT NULL
        RETURN avg(duration.inSeconds(p.created_at, p.first_response_at).seconds / 3600.0) AS value
    """,
    "get_talent_repeat_clients": """
        MATCH (p:Project {talent_id: $talent_id})
        WHERE p.client_id IS NOT NULL
        WITH p.client_id AS client, count(p) AS engagements
        WHERE engagements > 1
        RETURN count(client) AS value
    """,
}


class Neo4jTalentStore(TalentStore):

    def __init__(self, session_factory: Callable = get_session):
        self._session = session_factory

    def _single(self, query: str, **params) -> Optional[Dict[str, Any]]:
        with self._session() as session:
            record = session.run(query, **params).single()
            return record.data() if record else None

    def _count(self, query: str, **params) -> int:
        row = self._single(query, **params)
        return int(row["n"]) if row and row["n"] is not None else 0

    def call_procedure(self, name: str, talent_id: str) -> Any:
        row = self._single(PROCEDURES[name], talent_id=talent_id)
        return row["value"] if row else None

    # ── Talents ───────────────────────────────────

    def talent_exists(self, talent_id: str) -> bool:
        return self._count(
            "MATCH (t:Talent {id: $talent_id}) RETURN count(t) AS n",
            talent_id=talent_id,
        ) > 0

    def list_talent_ids(self) -> List[str]:
        with self._session() as session:
            result = session.run("MATCH (t:Talent) RETURN t.id AS id ORDER BY t.id")
            return [r["id"] for r in result]

    # ── Persisted scores ──────────────────────────

    def get_trust_score(self, talent_id: str) -> Optional[TrustScoreRecord]:
        row = self._single("""
            MATCH (t:Talent {id: $talent_id})
            RETURN t.trust_score AS score,
                   t.trust_score_factors AS factors,
                   t.trust_score_updated_at AS updated_at
        """, talent_id=talent_id)
        if not row or row["score"] is None:
            return None

        factors = json.loads(row["factors"]) if row["factors"] else {}
        return TrustScoreRecord(
            talent_id=talent_id,
            score=float(row["score"]),
            factors=TrustFactors.from_dict(factors),
            updated_at=row["updated_at"],
        )

    def save_trust_score(self, record: TrustScoreRecord) -> None:
        row = self._single("""
            MATCH (t:Talent {id: $talent_id})
            SET t.trust_score = $score,
                t.trust_score_factors = $factors,
                t.trust_score_updated_at = $updated_at
            RETURN t.id AS id
        """,
            talent_id=record.talent_id,
            score=record.score,
            factors=json.dumps(record.factors.to_dict()),
            updated_at=record.updated_at,
        )
        if not row:
            raise LookupError(f"talent {record.talent_id} does not exist")
        logger.debug("trust_score_persisted", talent_id=record.talent_id, score=record.score)

    def count_scores_below(self, threshold: float) -> int:
        return self._count("""
            MATCH (t:Talent)
            WHERE t.trust_score IS NOT NULL AND t.trust_score < $threshold
            RETURN count(t) AS n
        """, threshold=threshold)

    # ── Signals ───────────────────────────────────

    def count_completed_projects(self, talent_id: str) -> Optional[int]:
        return self._count("""
            MATCH (p:Project {talent_id: $talent_id, status: 'completed'})
            RETURN count(p) AS n
        """, talent_id=talent_id)

    def count_admin_complaints(self, talent_id: str) -> Optional[int]:
        return self._count("""
            MATCH (a:AuditLog {entity_id: $talent_id, action: $action})
            RETURN count(a) AS n
        """, talent_id=talent_id, action=ACTION_FLAG_TALENT)

    def count_missed_deadlines(self, talent_id: str) -> Optional[int]:
        return self._count("""
            MATCH (p:Project {talent_id: $talent_id})
            WHERE p.deadline < datetime() AND p.status <> 'completed'
            RETURN count(p) AS n
        """, talent_id=talent_id)

    def count_positive_ratings(self, talent_id: str) -> Optional[int]:
        return self._count("""
            MATCH (p:Project {talent_id: $talent_id})
            MATCH (r:Review {project_id: p.id})
            WHERE r.rating >= $min_rating
            RETURN count(r) AS n
        """, talent_id=talent_id, min_rating=POSITIVE_RATING_MIN)

    def avg_response_time_hours(self, talent_id: str) -> Optional[float]:
        value = self.call_procedure("get_talent_avg_response_time", talent_id)
        return float(value) if value is not None else None

    def repeat_client_count(self, talent_id: str) -> Optional[int]:
        value = self.call_procedure("get_talent_repeat_clients", talent_id)
        return int(value) if value is not None else None

    # ── Users ─────────────────────────────────────

    def get_user_role(self, user_id: str) -> Optional[str]:
        row = self._single(
            "MATCH (u:User {id: $user_id}) RETURN u.user_role AS role",
            user_id=user_id,
        )
        return row["role"] if row else None


class Neo4jAuditSink(AuditSink):
    """Append-only writer for :AuditLog nodes."""

    def __init__(self, session_factory: Callable = get_session):
        self._session = session_factory

    def append(self, entry: AuditEntry) -> None:
        with self._session() as session:
            session.run("""
                CREATE (a:AuditLog {
                    audit_id: randomUUID(),
                    admin_id: $admin_id,
                    action: $action,
                    entity_type: $entity_type,
                    entity_id: $entity_id,
                    details: $details,
                    created_at: datetime()
                })
            """,
                admin_id=entry.admin_id,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                details=json.dumps(entry.details, default=str),
            )
