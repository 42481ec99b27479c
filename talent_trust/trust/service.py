"""
Talent Trust - Score Service

The three admin operations over trust scores, shared by the HTTP API and the
batch job:

    resolve          persisted score if there is one, else computed on the fly
    update           aggregate -> score -> persist -> audit, for one talent
    recalculate_all  the same cycle for every talent, tolerant of per-talent failure

Reads never write. A score only becomes persisted through update or
recalculate_all, both of which are explicit administrative actions.

Failure policy:
    - Missing signals default inside the aggregator and never surface here.
    - An unknown talent raises TalentNotFound on both read and write paths.
    - A failed persisted-score read, talent lookup, aggregation, score write
      or talent enumeration raises UpstreamFailure.
    - A failed audit write is logged and reported as audited=False; the
      score that was already written stays written.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog

from talent_trust.errors import TalentNotFound, UpstreamFailure
from talent_trust.trust.aggregator import FactorAggregator, StoreFactorAggregator
from talent_trust.trust.engine import (
    LOW_TRUST_THRESHOLD,
    TrustFactors,
    compute_score,
    needs_improvement_plan,
)
from talent_trust.trust.guard import require_admin_role
from talent_trust.trust.store import (
    ACTION_RECALCULATE_ALL,
    ACTION_UPDATE_TRUST_SCORE,
    AuditEntry,
    AuditSink,
    TalentStore,
    TrustScoreRecord,
    utc_now_iso,
)

logger = structlog.get_logger()

ON_DEMAND_NOTE = "Trust score calculated on demand (not yet saved)"


# =============================================
# RESULTS
# =============================================

@dataclass
class ResolvedScore:
    score: float
    factors: TrustFactors
    last_updated: Optional[str]
    from_cache: bool


@dataclass
class ScoreResult:
    talent_id: str
    score: float
    factors: TrustFactors
    updated_at: str
    audited: bool = True

    def to_details(self) -> Dict[str, Any]:
        """Audit payload: the full result of the update."""
        return {
            "trust_score": self.score,
            "factors": self.factors.to_dict(),
            "updated_at": self.updated_at,
        }


@dataclass
class TalentResult:
    talent_id: str
    score: Optional[float]
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "talentId": self.talent_id,
            "trustScore": self.score,
            "success": self.success,
        }


@dataclass
class BatchResult:
    results: List[TalentResult] = field(default_factory=list)
    audited: bool = True

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded

    @property
    def needing_improvement(self) -> List[str]:
        """Talents whose new score is below the improvement-plan line."""
        return [
            r.talent_id for r in self.results
            if r.success and needs_improvement_plan(r.score)
        ]


# =============================================
# SERVICE
# =============================================

class TrustScoreService:

    def __init__(
        self,
        store: TalentStore,
        audit: AuditSink,
        aggregator: Optional[FactorAggregator] = None,
    ):
        self.store = store
        self.audit = audit
        self.aggregator = aggregator or StoreFactorAggregator(store)

    # ── Resolve ───────────────────────────────────

    def resolve(self, talent_id: str, requester_role: Optional[str]) -> ResolvedScore:
        require_admin_role(requester_role)

        try:
            record = self.store.get_trust_score(talent_id)
        except Exception as e:
            logger.error("trust_score_read_failed", talent_id=talent_id, error=str(e))
            raise UpstreamFailure("trust score read", e) from e

        if record is not None and record.score is not None:
            return ResolvedScore(
                score=record.score,
                factors=record.factors,
                last_updated=record.updated_at,
                from_cache=True,
            )

        self._require_talent(talent_id)

        factors = self._aggregate(talent_id)
        score = compute_score(factors)
        logger.info("trust_score_computed_on_demand", talent_id=talent_id, score=score)
        return ResolvedScore(
            score=score,
            factors=factors,
            last_updated=None,
            from_cache=False,
        )

    # ── Update ────────────────────────────────────

    def update(
        self,
        talent_id: str,
        requester_id: Optional[str],
        requester_role: Optional[str],
    ) -> ScoreResult:
        require_admin_role(requester_role)

        self._require_talent(talent_id)

        result = self._score_and_persist(talent_id)

        result.audited = self._append_audit(AuditEntry(
            admin_id=requester_id,
            action=ACTION_UPDATE_TRUST_SCORE,
            entity_id=talent_id,
            details=result.to_details(),
        ))

        logger.info("trust_score_updated",
                    talent_id=talent_id,
                    score=result.score,
                    admin_id=requester_id,
                    defaulted=result.factors.defaulted or None)
        return result

    # ── Recalculate all ───────────────────────────

    def recalculate_all(
        self,
        requester_id: Optional[str],
        requester_role: Optional[str],
    ) -> BatchResult:
        require_admin_role(requester_role)

        # An enumeration failure aborts the batch; it is not "zero talents".
        try:
            talent_ids = self.store.list_talent_ids()
        except Exception as e:
            logger.error("talent_enumeration_failed", error=str(e))
            raise UpstreamFailure("talent enumeration", e) from e

        logger.info("trust_recalculation_starting", talents=len(talent_ids), admin_id=requester_id)
        batch = BatchResult()

        for talent_id in talent_ids:
            try:
                result = self._score_and_persist(talent_id)
                batch.results.append(TalentResult(talent_id, result.score, success=True))
            except Exception as e:
                logger.warning("trust_recalculation_talent_failed",
                               talent_id=talent_id,
                               error=str(e),
                               type=type(e).__name__)
                batch.results.append(TalentResult(talent_id, None, success=False, error=str(e)))

        batch.audited = self._append_audit(AuditEntry(
            admin_id=requester_id,
            action=ACTION_RECALCULATE_ALL,
            entity_id=None,
            details={
                "count": batch.processed,
                "succeeded": batch.succeeded,
                "failed": batch.failed,
                "timestamp": utc_now_iso(),
            },
        ))

        logger.info("trust_recalculation_complete",
                    processed=batch.processed,
                    succeeded=batch.succeeded,
                    failed=batch.failed)
        return batch

    # ── Internals ─────────────────────────────────

    def _require_talent(self, talent_id: str) -> None:
        try:
            exists = self.store.talent_exists(talent_id)
        except Exception as e:
            raise UpstreamFailure("talent lookup", e) from e
        if not exists:
            raise TalentNotFound(talent_id)

    def _aggregate(self, talent_id: str) -> TrustFactors:
        # StoreFactorAggregator never raises; other implementations may.
        try:
            return self.aggregator.get_factors(talent_id)
        except Exception as e:
            logger.error("trust_factor_aggregation_failed", talent_id=talent_id, error=str(e))
            raise UpstreamFailure("trust factor aggregation", e) from e

    def _score_and_persist(self, talent_id: str) -> ScoreResult:
        factors = self._aggregate(talent_id)
        score = compute_score(factors)
        updated_at = utc_now_iso()

        try:
            self.store.save_trust_score(TrustScoreRecord(
                talent_id=talent_id,
                score=score,
                factors=factors,
                updated_at=updated_at,
            ))
        except Exception as e:
            logger.error("trust_score_write_failed", talent_id=talent_id, error=str(e))
            raise UpstreamFailure("trust score write", e) from e

        return ScoreResult(talent_id=talent_id, score=score, factors=factors, updated_at=updated_at)

    def _append_audit(self, entry: AuditEntry) -> bool:
        try:
            self.audit.append(entry)
            return True
        except Exception as e:
            logger.error("audit_write_failed",
                         action=entry.action,
                         entity_id=entry.entity_id,
                         error=str(e))
            return False

    # ── Stats ─────────────────────────────────────

    def count_low_trust(
        self,
        requester_role: Optional[str],
        threshold: float = LOW_TRUST_THRESHOLD,
    ) -> int:
        require_admin_role(requester_role)
        try:
            return self.store.count_scores_below(threshold)
        except Exception as e:
            raise UpstreamFailure("low trust count", e) from e
