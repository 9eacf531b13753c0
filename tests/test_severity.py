"""Tests for severity aggregation and recommendations."""
import pytest

from infraseal.core.drift_engine import DriftFinding
from infraseal.core.errors import InvalidThresholdError
from infraseal.core.severity import (
    DEFAULT_THRESHOLDS,
    RecommendationTier,
    Threshold,
    aggregate,
    recommend,
    validate_thresholds,
)
from infraseal.core.value_differ import DivergenceKind


def finding(severity, name="field"):
    return DriftFinding((name,), DivergenceKind.CHANGED, "GENERIC_CHANGE", severity)


class TestRecommend:
    @pytest.mark.parametrize(
        "score, tier",
        [
            (0, RecommendationTier.STABLE),
            (1, RecommendationTier.STABLE),
            (1.5, RecommendationTier.MINOR_DRIFT),
            (5.0, RecommendationTier.MINOR_DRIFT),
            (5.01, RecommendationTier.SEVERE_DRIFT),
            (9.5, RecommendationTier.SEVERE_DRIFT),
        ],
    )
    def test_default_thresholds(self, score, tier):
        assert recommend(score) is tier

    def test_custom_thresholds_in_any_order(self):
        table = [
            Threshold(0, RecommendationTier.MINOR_DRIFT),
            Threshold(2, RecommendationTier.SEVERE_DRIFT),
        ]
        assert recommend(0, table) is RecommendationTier.STABLE
        assert recommend(0.5, table) is RecommendationTier.MINOR_DRIFT
        assert recommend(3, table) is RecommendationTier.SEVERE_DRIFT

    def test_empty_table_is_always_stable(self):
        assert recommend(100, []) is RecommendationTier.STABLE

    def test_descriptions(self):
        assert "Stable" in RecommendationTier.STABLE.description
        assert "rollback" in RecommendationTier.SEVERE_DRIFT.description
        assert "Forward-apply" in RecommendationTier.MINOR_DRIFT.description


class TestAggregate:
    def test_empty_findings(self):
        assert aggregate([]) == (0, RecommendationTier.STABLE)

    def test_sums_severities(self):
        total, tier = aggregate([finding(4), finding(5), finding(0.5)])
        assert total == 9.5
        assert tier is RecommendationTier.SEVERE_DRIFT

    def test_adding_a_finding_never_decreases_score(self):
        findings = [finding(0.5), finding(1)]
        before, _ = aggregate(findings)
        for extra in (0, 0.25, 4):
            after, _ = aggregate(findings + [finding(extra, "extra")])
            assert after >= before

    def test_consumes_generators(self):
        total, _ = aggregate(finding(s) for s in (1, 2))
        assert total == 3


class TestValidation:
    def test_sorted_highest_first(self):
        table = validate_thresholds(reversed(DEFAULT_THRESHOLDS))
        assert [t.lower_bound for t in table] == [5, 1]

    def test_duplicate_bounds(self):
        with pytest.raises(InvalidThresholdError, match="Duplicate"):
            validate_thresholds(
                [Threshold(1, RecommendationTier.MINOR_DRIFT), Threshold(1, RecommendationTier.SEVERE_DRIFT)]
            )

    def test_infinite_bound(self):
        with pytest.raises(InvalidThresholdError):
            validate_thresholds([Threshold(float("inf"), RecommendationTier.SEVERE_DRIFT)])
