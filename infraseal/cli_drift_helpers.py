"""Shared drift helper utilities for CLI modules."""
from __future__ import annotations

from typing import Optional

from infraseal.config.loader import Policy, load_policy, load_state
from infraseal.core.config import get_config
from infraseal.core.drift_engine import DriftReport
from infraseal.core.reconciler import Reconciler
from infraseal.core.severity import RecommendationTier

# --fail-on choice -> tiers that fail the run
FAIL_ON_TIERS = {
    "never": frozenset(),
    "minor": frozenset({RecommendationTier.MINOR_DRIFT, RecommendationTier.SEVERE_DRIFT}),
    "severe": frozenset({RecommendationTier.SEVERE_DRIFT}),
}

DRIFT_EXIT_CODE = 2


def resolve_policy(policy_path: Optional[str] = None) -> Policy:
    """Load the policy named on the command line, else INFRASEAL_POLICY, else built-ins."""
    return load_policy(policy_path or get_config().policy_file)


def analyze_drift(
    declared_path: str,
    live_path: str,
    policy: Optional[Policy] = None,
) -> DriftReport:
    """Load both state files and run a drift analysis."""
    policy = policy or resolve_policy()
    declared = load_state(declared_path, policy.unordered_fields)
    live = load_state(live_path, policy.unordered_fields)

    reconciler = Reconciler(
        declared,
        rules=policy.rules,
        thresholds=policy.thresholds,
        max_depth=get_config().max_depth,
    )
    return reconciler.analyze_drift(live)


def exit_code_for(report: DriftReport, fail_on: str = "severe") -> int:
    """Map a report to a process exit code for CI gating."""
    if report.recommendation in FAIL_ON_TIERS[fail_on]:
        return DRIFT_EXIT_CODE
    return 0
