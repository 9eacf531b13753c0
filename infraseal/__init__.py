"""InfraSeal - configuration drift detection for declared vs. live infrastructure."""

from infraseal.core.drift_engine import DriftFinding, DriftReport, compare
from infraseal.core.errors import (
    ConfigurationError,
    CyclicStateError,
    InfraSealError,
    InvalidRuleSetError,
    InvalidStateError,
    InvalidThresholdError,
)
from infraseal.core.reconciler import Reconciler
from infraseal.core.rules import ClassificationRule, MatchMode, RuleEngine
from infraseal.core.severity import RecommendationTier, Threshold, aggregate
from infraseal.core.value_differ import DivergenceKind, diff

__version__ = "0.1.0"

__all__ = [
    "ClassificationRule",
    "ConfigurationError",
    "CyclicStateError",
    "DivergenceKind",
    "DriftFinding",
    "DriftReport",
    "InfraSealError",
    "InvalidRuleSetError",
    "InvalidStateError",
    "InvalidThresholdError",
    "MatchMode",
    "Reconciler",
    "RecommendationTier",
    "RuleEngine",
    "Threshold",
    "aggregate",
    "compare",
    "diff",
]
