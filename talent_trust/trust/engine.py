"""
Talent Trust - Trust Score Engine

Trust Score = f(completed projects, positive ratings, repeat clients,
                admin complaints, missed deadlines, response time)

Every talent starts at a neutral 50. Each factor moves the score by a fixed
weight, response time adds a bonus or a penalty by bracket, and the total is
clamped to 0-100 once at the very end.

    Completed project      +5 each
    Positive rating (4-5)  +3 each
    Repeat client         +10 each
    Admin complaint       -15 each
    Missed deadline        -8 each
    Response time          <2h +10 | <6h +5 | >24h -10

Score Labels:
    90-100  Exceptional
    80-89   Excellent
    70-79   Very Good
    60-69   Good
    50-59   Average
    40-49   Fair        (below 40 requires a performance improvement plan)
    30-39   Poor
    20-29   Very Poor
    0-19    Critical

This module is pure: no I/O, no clock, no globals mutated.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


# =============================================
# WEIGHTS
# =============================================

BASE_SCORE = 50.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0

COMPLETED_PROJECT_WEIGHT = 5
POSITIVE_RATING_WEIGHT = 3
CLIENT_RETENTION_WEIGHT = 10
ADMIN_COMPLAINT_WEIGHT = 15
MISSED_DEADLINE_WEIGHT = 8

# Response time brackets, in hours. Strict comparisons, checked in order.
FAST_RESPONSE_HOURS = 2
FAST_RESPONSE_BONUS = 10
GOOD_RESPONSE_HOURS = 6
GOOD_RESPONSE_BONUS = 5
SLOW_RESPONSE_HOURS = 24
SLOW_RESPONSE_PENALTY = 10

DEFAULT_RESPONSE_TIME_HOURS = 12.0

LOW_TRUST_THRESHOLD = 40


# =============================================
# FACTORS
# =============================================

# attribute name -> wire key (camelCase, as stored in trust_score_factors)
FACTOR_KEYS = {
    "completed_projects": "completedProjects",
    "admin_complaints": "adminComplaints",
    "missed_deadlines": "missedDeadlines",
    "positive_ratings": "positiveRatings",
    "response_time": "responseTime",
    "client_retention": "clientRetention",
}


@dataclass
class TrustFactors:
    """
    Point-in-time snapshot of the six signals for one talent.

    `defaulted` names every factor that fell back to its default because the
    underlying signal was missing or unreadable. A talent with no history and
    a talent whose data could not be read produce the same numbers; this
    list is how the two are told apart.
    """
    completed_projects: int = 0
    admin_complaints: int = 0
    missed_deadlines: int = 0
    positive_ratings: int = 0
    response_time: float = DEFAULT_RESPONSE_TIME_HOURS
    client_retention: int = 0
    defaulted: List[str] = field(default_factory=list)

    @classmethod
    def defaults(cls) -> "TrustFactors":
        """All-default snapshot, every factor marked as defaulted."""
        return cls(defaulted=list(FACTOR_KEYS))

    @property
    def is_complete(self) -> bool:
        return not self.defaulted

    def to_dict(self) -> Dict[str, Any]:
        d = {wire: getattr(self, attr) for attr, wire in FACTOR_KEYS.items()}
        if self.defaulted:
            d["defaulted"] = [FACTOR_KEYS[a] for a in self.defaulted]
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrustFactors":
        """Accepts camelCase wire keys or snake_case attribute names."""
        data = data or {}
        kwargs = {}
        for attr, wire in FACTOR_KEYS.items():
            value = data.get(wire, data.get(attr))
            if value is not None:
                kwargs[attr] = float(value) if attr == "response_time" else int(value)
        wire_to_attr = {w: a for a, w in FACTOR_KEYS.items()}
        kwargs["defaulted"] = [
            wire_to_attr.get(name, name) for name in data.get("defaulted", [])
        ]
        return cls(**kwargs)


# =============================================
# THE SCORING FUNCTION
# =============================================

def response_time_adjustment(response_time: float) -> int:
    if response_time < FAST_RESPONSE_HOURS:
        return FAST_RESPONSE_BONUS
    if response_time < GOOD_RESPONSE_HOURS:
        return GOOD_RESPONSE_BONUS
    if response_time > SLOW_RESPONSE_HOURS:
        return -SLOW_RESPONSE_PENALTY
    return 0


def compute_score(factors: TrustFactors) -> float:
    """Map a factor snapshot to a trust score in [0, 100]."""
    score = BASE_SCORE

    # Positive factors
    score += factors.completed_projects * COMPLETED_PROJECT_WEIGHT
    score += factors.positive_ratings * POSITIVE_RATING_WEIGHT
    score += factors.client_retention * CLIENT_RETENTION_WEIGHT

    # Negative factors
    score -= factors.admin_complaints * ADMIN_COMPLAINT_WEIGHT
    score -= factors.missed_deadlines * MISSED_DEADLINE_WEIGHT

    score += response_time_adjustment(factors.response_time)

    return max(MIN_SCORE, min(MAX_SCORE, score))


# =============================================
# PRESENTATION
# =============================================

_LABELS = [
    (90, "Exceptional"),
    (80, "Excellent"),
    (70, "Very Good"),
    (60, "Good"),
    (50, "Average"),
    (40, "Fair"),
    (30, "Poor"),
    (20, "Very Poor"),
]

_BANDS = [
    (80, "high"),
    (60, "good"),
    (40, "fair"),
]


def score_label(score: float) -> str:
    for floor, label in _LABELS:
        if score >= floor:
            return label
    return "Critical"


def score_band(score: float) -> str:
    for floor, band in _BANDS:
        if score >= floor:
            return band
    return "low"


def needs_improvement_plan(score: float) -> bool:
    """Talent below this line should be pulled from auction marketing."""
    return score < LOW_TRUST_THRESHOLD
