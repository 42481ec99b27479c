"""
Talent Trust - Factor Aggregator

Reads the six behavioral signals for one talent and assembles TrustFactors.

Each signal is read independently and guarded on its own: if the
repeat-client procedure is down we still get completed projects, ratings and
everything else. A failed or empty read falls back to that factor's default
and is recorded in TrustFactors.defaulted. get_factors never raises.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import structlog

from talent_trust.trust.engine import DEFAULT_RESPONSE_TIME_HOURS, FACTOR_KEYS, TrustFactors
from talent_trust.trust.store import TalentStore

logger = structlog.get_logger()


class FactorAggregator(ABC):
    """
    Source of TrustFactors. Callers depend on this interface only, so a
    batched implementation (one query across all talents) can replace the
    per-signal one without touching the score function or the service.
    """

    @abstractmethod
    def get_factors(self, talent_id: str) -> TrustFactors:
        ...


class StoreFactorAggregator(FactorAggregator):
    """One store round trip per signal."""

    def __init__(self, store: TalentStore):
        self.store = store

    def get_factors(self, talent_id: str) -> TrustFactors:
        factors = TrustFactors()

        counts = [
            ("completed_projects", self.store.count_completed_projects),
            ("admin_complaints", self.store.count_admin_complaints),
            ("missed_deadlines", self.store.count_missed_deadlines),
            ("positive_ratings", self.store.count_positive_ratings),
            ("client_retention", self.store.repeat_client_count),
        ]
        for name, read in counts:
            value = self._read(talent_id, name, read)
            if value is None:
                factors.defaulted.append(name)
            else:
                setattr(factors, name, max(0, int(value)))

        response_time = self._read(talent_id, "response_time", self.store.avg_response_time_hours)
        if response_time is None or float(response_time) < 0:
            factors.response_time = DEFAULT_RESPONSE_TIME_HOURS
            factors.defaulted.append("response_time")
        else:
            factors.response_time = float(response_time)

        if factors.defaulted:
            factors.defaulted.sort(key=list(FACTOR_KEYS).index)
            logger.debug("trust_factors_partial",
                         talent_id=talent_id,
                         defaulted=factors.defaulted)
        return factors

    def _read(self, talent_id: str, name: str, read: Callable[[str], Any]) -> Optional[Any]:
        try:
            return read(talent_id)
        except Exception as e:
            logger.warning("trust_factor_unavailable",
                           talent_id=talent_id,
                           factor=name,
                           error=str(e),
                           type=type(e).__name__)
            return None
