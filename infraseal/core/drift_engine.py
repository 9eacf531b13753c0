"""Declared vs. live drift detection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple, Union

from infraseal.core.logger import get_logger
from infraseal.core.rules import ClassificationRule, RuleEngine
from infraseal.core.severity import RecommendationTier
from infraseal.core.state import (
    MAX_STATE_DEPTH,
    ROOT,
    Path,
    format_path,
    path_sort_key,
    to_plain,
    validate_state,
)
from infraseal.core.value_differ import DivergenceKind, diff

logger = get_logger(__name__)


@dataclass(frozen=True)
class DriftFinding:
    """A classified, severity-scored divergence."""

    path: Path
    kind: DivergenceKind
    category: str
    severity: float
    declared: Any = None
    live: Any = None

    @property
    def location(self) -> str:
        return format_path(self.path) or "<root>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.location,
            "kind": self.kind.value,
            "category": self.category,
            "severity": self.severity,
            "declared": to_plain(self.declared),
            "live": to_plain(self.live),
        }


@dataclass(frozen=True)
class DriftReport:
    """Findings ordered by path, their summed severity and the recommendation."""

    findings: Tuple[DriftFinding, ...] = ()
    total_severity: float = 0
    recommendation: RecommendationTier = RecommendationTier.STABLE

    def is_clean(self) -> bool:
        return not self.findings

    def summary(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for finding in self.findings:
            counts[finding.category] = counts.get(finding.category, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_severity": self.total_severity,
            "recommendation": self.recommendation.value,
            "description": self.recommendation.description,
            "summary": self.summary(),
            "findings": [finding.to_dict() for finding in self.findings],
        }


def compare(
    declared: Any,
    live: Any,
    rules: Union[RuleEngine, Sequence[ClassificationRule], None] = None,
    max_depth: int = MAX_STATE_DEPTH,
) -> List[DriftFinding]:
    """Diff two state trees and classify every divergence.

    Both trees are validated up front so malformed or cyclic input fails
    before any finding is produced. Findings are returned sorted by path.
    """
    engine = rules if isinstance(rules, RuleEngine) else RuleEngine(rules)

    validate_state(declared, max_depth=max_depth)
    validate_state(live, max_depth=max_depth)

    findings: List[DriftFinding] = []
    for divergence in diff(ROOT, declared, live, max_depth=max_depth):
        category, severity = engine.classify(divergence.path, divergence.kind)
        findings.append(
            DriftFinding(
                path=divergence.path,
                kind=divergence.kind,
                category=category,
                severity=severity,
                declared=divergence.declared,
                live=divergence.live,
            )
        )

    # Stable sort keeps collection elements in their emitted order
    findings.sort(key=lambda finding: path_sort_key(finding.path))
    logger.debug(f"Compared states: {len(findings)} divergence(s)")
    return findings
