"""Drift reconciliation facade."""
from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from infraseal.core.drift_engine import DriftReport, compare
from infraseal.core.logger import get_logger
from infraseal.core.rules import ClassificationRule, RuleEngine
from infraseal.core.severity import (
    DEFAULT_THRESHOLDS,
    Threshold,
    aggregate,
    validate_thresholds,
)
from infraseal.core.state import MAX_STATE_DEPTH, validate_state

logger = get_logger(__name__)


class Reconciler:
    """Binds a declared state to a rule set and threshold table.

    The declared tree is validated once at construction; the rule set and
    threshold table are validated eagerly too, so configuration errors
    surface before any comparison. ``analyze_drift`` holds no state between
    calls and may be used from several threads provided callers do not
    mutate the trees they pass in.
    """

    def __init__(
        self,
        declared_state: Any,
        rules: Union[RuleEngine, Sequence[ClassificationRule], None] = None,
        thresholds: Optional[Sequence[Threshold]] = None,
        max_depth: int = MAX_STATE_DEPTH,
    ):
        validate_state(declared_state, max_depth=max_depth)
        self.declared = declared_state
        self.rule_engine = RuleEngine(rules)
        self.thresholds = validate_thresholds(
            DEFAULT_THRESHOLDS if thresholds is None else thresholds
        )
        self.max_depth = max_depth

    @property
    def rules(self):
        return self.rule_engine.rules

    def analyze_drift(self, live_state: Any) -> DriftReport:
        findings = compare(
            self.declared, live_state, self.rule_engine, max_depth=self.max_depth
        )
        total_severity, recommendation = aggregate(findings, self.thresholds)
        logger.debug(
            f"Drift analysis complete: score={total_severity:.2f} "
            f"recommendation={recommendation.value}"
        )
        return DriftReport(
            findings=tuple(findings),
            total_severity=total_severity,
            recommendation=recommendation,
        )
