"""Policy file models for classification rules and recommendation thresholds."""
import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from infraseal.core.rules import ClassificationRule, MatchMode
from infraseal.core.severity import RecommendationTier, Threshold
from infraseal.core.value_differ import DivergenceKind


class RuleSpec(BaseModel):
    """One classification rule as written in a policy file."""

    model_config = ConfigDict(extra='forbid')

    category: str = Field(..., min_length=1, description="Category label reported on findings")
    severity: float = Field(..., ge=0, description="Severity weight added per finding")
    pattern: str = Field("", description="Text matched against path segments")
    match: MatchMode = MatchMode.SUBSTRING
    kinds: List[DivergenceKind] = Field(
        default_factory=list, description="Restrict to these divergence kinds (empty = all)"
    )

    @field_validator('severity')
    @classmethod
    def validate_severity(cls, v):
        """Reject NaN and infinite weights."""
        if not math.isfinite(v):
            raise ValueError(f"Severity must be a finite number. Got: {v}")
        return v

    @model_validator(mode='after')
    def validate_pattern_required(self) -> 'RuleSpec':
        """Every matcher except 'any' needs a pattern."""
        if self.match is not MatchMode.ANY and not self.pattern:
            raise ValueError(f"Rule '{self.category}' requires a pattern for match '{self.match.value}'")
        return self

    def to_rule(self) -> ClassificationRule:
        return ClassificationRule(
            category=self.category,
            severity=self.severity,
            pattern=self.pattern,
            match=self.match,
            kinds=frozenset(self.kinds),
        )


class ThresholdSpec(BaseModel):
    """Scores strictly above ``above`` map to ``tier``."""

    model_config = ConfigDict(extra='forbid')

    above: float
    tier: RecommendationTier

    @field_validator('above')
    @classmethod
    def validate_above(cls, v):
        if not math.isfinite(v):
            raise ValueError(f"Threshold must be a finite number. Got: {v}")
        return v

    def to_threshold(self) -> Threshold:
        return Threshold(self.above, self.tier)


class PolicyConfig(BaseModel):
    """Complete policy file.

    Custom rules are evaluated ahead of the built-in rules unless
    ``replace_builtin_rules`` is set, in which case a generic default rule
    is appended when the file does not end with one.
    """

    model_config = ConfigDict(
        extra='forbid',
        json_schema_extra={
            "example": {
                "rules": [
                    {"category": "INSTANCE_TYPE_CHANGE", "severity": 3,
                     "pattern": "instanceType", "match": "exact"},
                ],
                "thresholds": [
                    {"above": 5, "tier": "severe_drift"},
                    {"above": 1, "tier": "minor_drift"},
                ],
                "unordered_fields": ["securityGroupIds"],
            }
        },
    )

    rules: List[RuleSpec] = Field(default_factory=list)
    replace_builtin_rules: bool = False
    thresholds: Optional[List[ThresholdSpec]] = None
    unordered_fields: List[str] = Field(
        default_factory=list, description="Mapping keys whose lists compare as sets"
    )

    @field_validator('thresholds')
    @classmethod
    def validate_unique_bounds(cls, v):
        """Threshold bounds must be unique."""
        if v is None:
            return v
        bounds = [spec.above for spec in v]
        if len(bounds) != len(set(bounds)):
            raise ValueError(f"Threshold bounds must be unique. Got: {bounds}")
        return v
