"""Classification rules mapping divergences to categories and severities."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Sequence, Tuple, Union

from infraseal.core.errors import InvalidRuleSetError
from infraseal.core.logger import get_logger
from infraseal.core.state import Path, format_path
from infraseal.core.value_differ import DivergenceKind

logger = get_logger(__name__)


class MatchMode(Enum):
    """How a rule pattern is tested against path segments."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"
    ANY = "any"  # always matches; reserved for the default rule


class Category:
    """Built-in category labels."""

    SECURITY_GROUP_CHANGE = "SECURITY_GROUP_CHANGE"
    DATABASE_VERSION_CHANGE = "DATABASE_VERSION_CHANGE"
    TAG_CHANGE = "TAG_CHANGE"
    GENERIC_CHANGE = "GENERIC_CHANGE"


@dataclass(frozen=True)
class ClassificationRule:
    """A (matcher, category, severity) triple.

    The matcher tests ``pattern`` against every string segment of the path,
    not only the leaf. ``kinds`` optionally restricts the rule to certain
    divergence kinds; empty means all kinds.
    """

    category: str
    severity: float
    pattern: str = ""
    match: MatchMode = MatchMode.SUBSTRING
    kinds: FrozenSet[DivergenceKind] = frozenset()

    @classmethod
    def default(
        cls, category: str = Category.GENERIC_CHANGE, severity: float = 1
    ) -> "ClassificationRule":
        """Unconditional fallback rule."""
        return cls(category=category, severity=severity, match=MatchMode.ANY)

    @property
    def is_default(self) -> bool:
        return self.match is MatchMode.ANY and not self.kinds

    def matches(self, path: Path, kind: DivergenceKind) -> bool:
        if self.kinds and kind not in self.kinds:
            return False
        if self.match is MatchMode.ANY:
            return True
        return any(self._match_segment(part) for part in path if isinstance(part, str))

    def _match_segment(self, segment: str) -> bool:
        if self.match is MatchMode.EXACT:
            return segment == self.pattern
        if self.match is MatchMode.PREFIX:
            return segment.startswith(self.pattern)
        return self.pattern in segment


DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule(Category.SECURITY_GROUP_CHANGE, 5, "securityGroup"),
    ClassificationRule(Category.DATABASE_VERSION_CHANGE, 4, "dbVersion"),
    # prefix match covers "tag" and "tags" but not "stage" or "cpuPercentage"
    ClassificationRule(Category.TAG_CHANGE, 0.5, "tag", MatchMode.PREFIX),
    ClassificationRule.default(),
)


def validate_rules(rules: Iterable[ClassificationRule]) -> Tuple[ClassificationRule, ...]:
    """Check a rule list can classify every divergence and return it as a tuple.

    Raises:
        InvalidRuleSetError: empty list, missing trailing default rule,
            empty pattern or invalid severity
    """
    rules = tuple(rules)
    if not rules:
        raise InvalidRuleSetError("Rule set is empty")

    for position, rule in enumerate(rules):
        if not isinstance(rule, ClassificationRule):
            raise InvalidRuleSetError(f"Rule #{position} is not a ClassificationRule: {rule!r}")
        if not rule.category:
            raise InvalidRuleSetError(f"Rule #{position} has no category")
        if rule.match is not MatchMode.ANY and not rule.pattern:
            raise InvalidRuleSetError(f"Rule #{position} ({rule.category}) has an empty pattern")
        if (
            isinstance(rule.severity, bool)
            or not isinstance(rule.severity, (int, float))
            or not math.isfinite(rule.severity)
            or rule.severity < 0
        ):
            raise InvalidRuleSetError(
                f"Rule #{position} ({rule.category}) has invalid severity {rule.severity!r}"
            )

    if not rules[-1].is_default:
        raise InvalidRuleSetError(
            "Rule set must end with a default rule that matches every divergence"
        )
    return rules


class RuleEngine:
    """Evaluates an ordered rule list; the first matching rule wins."""

    def __init__(
        self, rules: Union["RuleEngine", Sequence[ClassificationRule], None] = None
    ):
        if isinstance(rules, RuleEngine):
            rules = rules.rules
        self.rules = validate_rules(DEFAULT_RULES if rules is None else rules)

    def classify(self, path: Path, kind: DivergenceKind) -> Tuple[str, float]:
        for rule in self.rules:
            if rule.matches(path, kind):
                logger.debug(
                    f"{kind.value} at {format_path(path) or '<root>'} -> {rule.category}"
                )
                return rule.category, rule.severity
        # validate_rules guarantees a trailing default rule
        raise InvalidRuleSetError(f"No rule matched {kind.value} at {format_path(path)}")

    def with_rule(self, rule: ClassificationRule) -> "RuleEngine":
        """Return a new engine with ``rule`` evaluated ahead of the current rules."""
        return RuleEngine((rule,) + self.rules)
