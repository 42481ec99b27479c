"""
Talent Trust - Store interfaces

The engine never talks to a database directly. It reads and writes through
these two abstract collaborators; talent_trust.db.repositories provides the
Neo4j implementations.

Signal reads:
    count_completed_projects   projects with status 'completed'
    count_admin_complaints     audit entries with action 'flag_talent'
    count_missed_deadlines     deadline passed, status not 'completed'
    count_positive_ratings     reviews rated >= 4 on the talent's projects
    avg_response_time_hours    procedure get_talent_avg_response_time
    repeat_client_count        procedure get_talent_repeat_clients

A signal read returns None when the store has no data for it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from talent_trust.trust.engine import TrustFactors

ENTITY_TYPE_TALENT = "talent_profiles"

ACTION_FLAG_TALENT = "flag_talent"
ACTION_UPDATE_TRUST_SCORE = "update_trust_score"
ACTION_RECALCULATE_ALL = "recalculate_all_trust_scores"

POSITIVE_RATING_MIN = 4


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TrustScoreRecord:
    talent_id: str
    score: float
    factors: TrustFactors
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "talent_id": self.talent_id,
            "score": self.score,
            "factors": self.factors.to_dict(),
            "updated_at": self.updated_at,
        }


@dataclass
class AuditEntry:
    admin_id: Optional[str]
    action: str
    entity_type: str = ENTITY_TYPE_TALENT
    entity_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "admin_id": self.admin_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "details": self.details,
        }


class TalentStore(ABC):

    # ── Talents ───────────────────────────────────

    @abstractmethod
    def talent_exists(self, talent_id: str) -> bool:
        ...

    @abstractmethod
    def list_talent_ids(self) -> List[str]:
        ...

    # ── Persisted scores ──────────────────────────

    @abstractmethod
    def get_trust_score(self, talent_id: str) -> Optional[TrustScoreRecord]:
        """Persisted score, or None when the talent was never scored."""

    @abstractmethod
    def save_trust_score(self, record: TrustScoreRecord) -> None:
        """Replace the talent's score, factors and timestamp in one write."""

    @abstractmethod
    def count_scores_below(self, threshold: float) -> int:
        ...

    # ── Signals ───────────────────────────────────

    @abstractmethod
    def count_completed_projects(self, talent_id: str) -> Optional[int]:
        ...

    @abstractmethod
    def count_admin_complaints(self, talent_id: str) -> Optional[int]:
        ...

    @abstractmethod
    def count_missed_deadlines(self, talent_id: str) -> Optional[int]:
        ...

    @abstractmethod
    def count_positive_ratings(self, talent_id: str) -> Optional[int]:
        ...

    @abstractmethod
    def avg_response_time_hours(self, talent_id: str) -> Optional[float]:
        ...

    @abstractmethod
    def repeat_client_count(self, talent_id: str) -> Optional[int]:
        ...

    # ── Users ─────────────────────────────────────

    @abstractmethod
    def get_user_role(self, user_id: str) -> Optional[str]:
        ...


class AuditSink(ABC):

    @abstractmethod
    def append(self, entry: AuditEntry) -> None:
        ...
