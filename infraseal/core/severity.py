"""Severity aggregation and recommendation tiers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, TYPE_CHECKING

from infraseal.core.errors import InvalidThresholdError

if TYPE_CHECKING:
    from infraseal.core.drift_engine import DriftFinding


class RecommendationTier(Enum):
    """Categorical outcome derived from the total severity score."""

    STABLE = "stable"
    MINOR_DRIFT = "minor_drift"
    SEVERE_DRIFT = "severe_drift"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    RecommendationTier.STABLE: "No significant drift. Stable.",
    RecommendationTier.MINOR_DRIFT: "Minor drift detected. Forward-apply safely recommended.",
    RecommendationTier.SEVERE_DRIFT: (
        "Severe drift detected. Requires manual investigation (rollback recommended)."
    ),
}


@dataclass(frozen=True)
class Threshold:
    """Scores strictly greater than ``lower_bound`` map to ``tier``."""

    lower_bound: float
    tier: RecommendationTier


DEFAULT_THRESHOLDS: Tuple[Threshold, ...] = (
    Threshold(5, RecommendationTier.SEVERE_DRIFT),
    Threshold(1, RecommendationTier.MINOR_DRIFT),
)

FALLBACK_TIER = RecommendationTier.STABLE


def validate_thresholds(thresholds: Iterable[Threshold]) -> Tuple[Threshold, ...]:
    """Return the table ordered highest bound first.

    Raises:
        InvalidThresholdError: non-finite or duplicate bounds
    """
    table = tuple(thresholds)
    seen = set()
    for threshold in table:
        if not isinstance(threshold, Threshold):
            raise InvalidThresholdError(f"Not a Threshold: {threshold!r}")
        bound = threshold.lower_bound
        if isinstance(bound, bool) or not isinstance(bound, (int, float)) or not math.isfinite(bound):
            raise InvalidThresholdError(f"Invalid threshold bound {bound!r}")
        if bound in seen:
            raise InvalidThresholdError(f"Duplicate threshold bound {bound!r}")
        seen.add(bound)
    return tuple(sorted(table, key=lambda threshold: threshold.lower_bound, reverse=True))


def recommend(
    total_severity: float, thresholds: Optional[Sequence[Threshold]] = None
) -> RecommendationTier:
    """Map a score to a tier; the first bound it strictly exceeds wins."""
    table = validate_thresholds(DEFAULT_THRESHOLDS if thresholds is None else thresholds)
    for threshold in table:
        if total_severity > threshold.lower_bound:
            return threshold.tier
    return FALLBACK_TIER


def aggregate(
    findings: Iterable["DriftFinding"], thresholds: Optional[Sequence[Threshold]] = None
) -> Tuple[float, RecommendationTier]:
    """Sum finding severities and map the total to a recommendation tier."""
    total_severity = sum((finding.severity for finding in findings), 0)
    return total_severity, recommend(total_severity, thresholds)
