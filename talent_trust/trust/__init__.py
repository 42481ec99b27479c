"""
Talent Trust - Scoring core.
Re-exports for convenience.
"""
from talent_trust.trust.engine import (
    TrustFactors,
    compute_score,
    score_label,
    score_band,
    needs_improvement_plan,
    LOW_TRUST_THRESHOLD,
)
from talent_trust.trust.aggregator import FactorAggregator, StoreFactorAggregator
from talent_trust.trust.service import TrustScoreService

__all__ = [
    "TrustFactors",
    "compute_score",
    "score_label",
    "score_band",
    "needs_improvement_plan",
    "LOW_TRUST_THRESHOLD",
    "FactorAggregator",
    "StoreFactorAggregator",
    "TrustScoreService",
]
