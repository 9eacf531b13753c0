"""Structural comparison of two state trees."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from infraseal.core.errors import CyclicStateError, InvalidStateError, StateDepthError
from infraseal.core.state import (
    MAX_STATE_DEPTH,
    PRIMITIVE_KINDS,
    ROOT,
    NodeKind,
    Path,
    element_sort_key,
    format_path,
    node_kind,
)


class DivergenceKind(Enum):
    """How a declared value differs from its live counterpart."""

    ADDED = "added"                  # present only in live
    REMOVED = "removed"              # present only in declared
    CHANGED = "changed"              # present in both, values differ
    TYPE_MISMATCH = "type_mismatch"  # present in both, incompatible node types


@dataclass(frozen=True)
class Divergence:
    """A single unclassified point of difference.

    For unordered collections the path is the collection itself and the
    added or removed element is carried in ``live`` / ``declared``.
    """

    path: Path
    kind: DivergenceKind
    declared: Any = None
    live: Any = None

    def __str__(self) -> str:
        return f"{self.kind.value} at {format_path(self.path) or '<root>'}"


def diff(
    path: Path,
    declared: Any,
    live: Any,
    max_depth: int = MAX_STATE_DEPTH,
) -> List[Divergence]:
    """Compare two state values and return every divergence beneath ``path``.

    Mapping keys are visited in sorted order and sequences element-wise by
    index, so the result does not depend on how either tree was built.
    Inputs are never mutated.
    """
    divergences: List[Divergence] = []
    _diff(tuple(path), declared, live, divergences, (set(), set()), max_depth)
    return divergences


def _diff(path, declared, live, out, ancestors, max_depth) -> None:
    declared_kind = node_kind(declared, path)
    live_kind = node_kind(live, path)

    if declared_kind is not live_kind:
        out.append(Divergence(path, DivergenceKind.TYPE_MISMATCH, declared, live))
        return

    if not declared_kind.is_container:
        if not _primitives_equal(declared, live):
            out.append(Divergence(path, DivergenceKind.CHANGED, declared, live))
        return

    if len(path) > max_depth:
        raise StateDepthError(path, max_depth)

    declared_seen, live_seen = ancestors
    if id(declared) in declared_seen or id(live) in live_seen:
        raise CyclicStateError(path)
    declared_seen.add(id(declared))
    live_seen.add(id(live))

    try:
        if declared_kind is NodeKind.MAPPING:
            _diff_mappings(path, declared, live, out, ancestors, max_depth)
        elif declared_kind is NodeKind.SEQUENCE:
            _diff_sequences(path, declared, live, out, ancestors, max_depth)
        else:
            _diff_collections(path, declared, live, out)
    finally:
        declared_seen.discard(id(declared))
        live_seen.discard(id(live))


def _diff_mappings(path, declared, live, out, ancestors, max_depth) -> None:
    keys = set(declared) | set(live)
    for key in keys:
        if not isinstance(key, str):
            raise InvalidStateError(path, f"Mapping key {key!r} is not a string", key)

    for key in sorted(keys):
        child = path + (key,)
        if key not in live:
            out.append(Divergence(child, DivergenceKind.REMOVED, declared[key], None))
        elif key not in declared:
            out.append(Divergence(child, DivergenceKind.ADDED, None, live[key]))
        else:
            _diff(child, declared[key], live[key], out, ancestors, max_depth)


def _diff_sequences(path, declared, live, out, ancestors, max_depth) -> None:
    # Element order is significant (e.g. firewall rule precedence).
    shared = min(len(declared), len(live))
    for index in range(shared):
        _diff(path + (index,), declared[index], live[index], out, ancestors, max_depth)
    for index in range(shared, len(declared)):
        out.append(Divergence(path + (index,), DivergenceKind.REMOVED, declared[index], None))
    for index in range(shared, len(live)):
        out.append(Divergence(path + (index,), DivergenceKind.ADDED, None, live[index]))


def _diff_collections(path, declared, live, out) -> None:
    declared_elements = _keyed_elements(path, declared)
    live_elements = _keyed_elements(path, live)

    for key in sorted(declared_elements.keys() - live_elements.keys()):
        out.append(Divergence(path, DivergenceKind.REMOVED, declared_elements[key], None))
    for key in sorted(live_elements.keys() - declared_elements.keys()):
        out.append(Divergence(path, DivergenceKind.ADDED, None, live_elements[key]))


def _keyed_elements(path, collection) -> dict:
    keyed = {}
    for element in collection:
        if node_kind(element, path) not in PRIMITIVE_KINDS:
            raise InvalidStateError(
                path, "Unordered collections may only hold primitive values", element
            )
        keyed[element_sort_key(element)] = element
    return keyed


def _primitives_equal(declared, live) -> bool:
    if declared == live:
        return True
    # NaN on both sides is the same value for drift purposes
    return (
        isinstance(declared, float)
        and isinstance(live, float)
        and math.isnan(declared)
        and math.isnan(live)
    )


__all__ = ["ROOT", "Divergence", "DivergenceKind", "diff"]
