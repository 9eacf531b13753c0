"""Policy and state file loaders."""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError

from infraseal.core.errors import PolicyError, StateFileError
from infraseal.core.logger import get_logger
from infraseal.core.rules import DEFAULT_RULES, ClassificationRule, validate_rules
from infraseal.core.severity import DEFAULT_THRESHOLDS, Threshold, validate_thresholds
from infraseal.core.state import PRIMITIVE_KINDS, node_kind
from infraseal.models.policy import PolicyConfig

logger = get_logger(__name__)

YAML_SUFFIXES = {".yml", ".yaml"}


class StateYamlLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


StateYamlLoader.add_constructor(
    "tag:yaml.org,2002:timestamp",
    lambda loader, node: loader.construct_scalar(node),
)


@dataclass
class Policy:
    """Engine-ready rules, thresholds and set-like field names."""

    rules: Tuple[ClassificationRule, ...] = DEFAULT_RULES
    thresholds: Tuple[Threshold, ...] = DEFAULT_THRESHOLDS
    unordered_fields: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, config: PolicyConfig) -> "Policy":
        custom = tuple(spec.to_rule() for spec in config.rules)
        if config.replace_builtin_rules:
            rules = custom
            if not rules or not rules[-1].is_default:
                rules += (ClassificationRule.default(),)
        else:
            rules = custom + DEFAULT_RULES

        thresholds = DEFAULT_THRESHOLDS
        if config.thresholds is not None:
            thresholds = tuple(spec.to_threshold() for spec in config.thresholds)

        return cls(
            rules=validate_rules(rules),
            thresholds=validate_thresholds(thresholds),
            unordered_fields=tuple(config.unordered_fields),
        )


def _read_document(path: Path, error_cls) -> Any:
    if not path.exists():
        raise error_cls(f"File not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in YAML_SUFFIXES:
                return yaml.load(f, Loader=StateYamlLoader)
            return json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise error_cls(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise error_cls(f"Failed to read {path}: {e}") from e


def load_policy(policy_path: Optional[str] = None) -> Policy:
    """Load a YAML/JSON policy file; without a path the built-in policy is returned."""
    if not policy_path:
        return Policy()

    path = Path(policy_path)
    raw = _read_document(path, PolicyError)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise PolicyError(f"Policy file must contain a mapping: {path}")

    try:
        config = PolicyConfig.model_validate(raw)
    except ValidationError as e:
        raise PolicyError(f"Invalid policy file {path}:\n{e}") from e

    policy = Policy.from_config(config)
    logger.debug(
        f"Loaded policy {path}: {len(policy.rules)} rules, {len(policy.thresholds)} thresholds"
    )
    return policy


def load_state(state_path: str, unordered_fields: Iterable[str] = ()) -> Any:
    """Read a JSON or YAML state document.

    Lists stored under any key named in ``unordered_fields`` are converted
    to frozensets so they compare as unordered collections. The returned
    tree is otherwise the parsed document.
    """
    path = Path(state_path)
    state = _read_document(path, StateFileError)
    fields = frozenset(unordered_fields)
    if fields:
        state = _mark_unordered(state, fields)
    logger.debug(f"Loaded state from {path}")
    return state


def _mark_unordered(node: Any, fields: frozenset, key: Optional[str] = None) -> Any:
    if isinstance(node, dict):
        return {k: _mark_unordered(v, fields, k) for k, v in node.items()}
    if isinstance(node, list):
        if key in fields:
            return _as_collection(node, key)
        return [_mark_unordered(item, fields) for item in node]
    return node


def _as_collection(items: list, key: str) -> frozenset:
    for item in items:
        if node_kind(item, (key,)) not in PRIMITIVE_KINDS:
            raise StateFileError(
                f"Field '{key}' is declared unordered but holds a non-primitive element: {item!r}"
            )
    return frozenset(items)
