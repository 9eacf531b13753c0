"""State tree model: node kinds, paths and validation.

A state tree is built from plain Python values:

    None                    -> Null
    bool                    -> Boolean
    int / float             -> Number
    str                     -> String
    list / tuple            -> ordered sequence
    set / frozenset         -> unordered collection (hashable primitives only)
    dict (str keys)         -> mapping

Paths are tuples of mapping keys (``str``) and sequence indices (``int``).
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterable, Tuple, Union

from infraseal.core.errors import CyclicStateError, InvalidStateError, StateDepthError

PathComponent = Union[str, int]
Path = Tuple[PathComponent, ...]

ROOT: Path = ()

# Deepest nesting the engine is designed for; deeper trees are rejected as malformed.
MAX_STATE_DEPTH = 64


class NodeKind(Enum):
    """Closed set of node types a state tree may hold."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    COLLECTION = "collection"
    MAPPING = "mapping"

    @property
    def is_container(self) -> bool:
        return self in (NodeKind.SEQUENCE, NodeKind.COLLECTION, NodeKind.MAPPING)


PRIMITIVE_KINDS = (NodeKind.NULL, NodeKind.BOOLEAN, NodeKind.NUMBER, NodeKind.STRING)

_PRIMITIVE_RANK = {
    NodeKind.NULL: 0,
    NodeKind.BOOLEAN: 1,
    NodeKind.NUMBER: 2,
    NodeKind.STRING: 3,
}


def node_kind(value: Any, path: Path = ROOT) -> NodeKind:
    """Return the NodeKind of ``value`` or raise InvalidStateError."""
    if value is None:
        return NodeKind.NULL
    # bool is an int subclass; it must never compare as a number
    if isinstance(value, bool):
        return NodeKind.BOOLEAN
    if isinstance(value, (int, float)):
        return NodeKind.NUMBER
    if isinstance(value, str):
        return NodeKind.STRING
    if isinstance(value, Mapping):
        return NodeKind.MAPPING
    if isinstance(value, (set, frozenset)):
        return NodeKind.COLLECTION
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    raise InvalidStateError(
        path, f"Unsupported value of type {type(value).__name__}", value
    )


def validate_state(node: Any, path: Path = ROOT, max_depth: int = MAX_STATE_DEPTH) -> None:
    """Walk a state tree and fail fast on anything outside the node types.

    Raises:
        InvalidStateError: unsupported value, non-string mapping key or
            unhashable/non-primitive collection element
        CyclicStateError: a container re-entered on its own ancestor path
        StateDepthError: nesting deeper than ``max_depth``
    """
    _validate(node, tuple(path), set(), max_depth)


def _validate(node: Any, path: Path, ancestors: set, max_depth: int) -> None:
    kind = node_kind(node, path)
    if not kind.is_container:
        return

    if len(path) > max_depth:
        raise StateDepthError(path, max_depth)

    marker = id(node)
    if marker in ancestors:
        raise CyclicStateError(path)
    ancestors.add(marker)

    try:
        if kind is NodeKind.MAPPING:
            for key, child in node.items():
                if not isinstance(key, str):
                    raise InvalidStateError(
                        path, f"Mapping key {key!r} is not a string", key
                    )
                _validate(child, path + (key,), ancestors, max_depth)
        elif kind is NodeKind.SEQUENCE:
            for index, child in enumerate(node):
                _validate(child, path + (index,), ancestors, max_depth)
        else:
            for element in node:
                if node_kind(element, path) not in PRIMITIVE_KINDS:
                    raise InvalidStateError(
                        path, "Unordered collections may only hold primitive values", element
                    )
    finally:
        ancestors.discard(marker)


def element_sort_key(value: Any) -> Tuple[int, int, Any]:
    """Total order over primitive values: null < booleans < numbers < strings.

    Also used as the identity of a collection element, so NaN keys equal
    each other and True stays distinct from 1.
    """
    kind = node_kind(value)
    rank = _PRIMITIVE_RANK[kind]
    if kind is NodeKind.NULL:
        return (rank, 0, 0)
    if kind is NodeKind.NUMBER and math.isnan(value):
        return (rank, 1, 0)
    return (rank, 0, value)


def path_sort_key(path: Path) -> Tuple[Tuple[int, Any], ...]:
    """Sort key for paths; indices order before keys at the same depth."""
    return tuple((0, part) if isinstance(part, int) else (1, part) for part in path)


def format_path(path: Iterable[PathComponent]) -> str:
    """Render a path as ``tags.owner`` / ``securityGroup[1]``."""
    rendered = []
    for part in path:
        if isinstance(part, int):
            rendered.append(f"[{part}]")
        elif rendered:
            rendered.append(f".{part}")
        else:
            rendered.append(part)
    return "".join(rendered)


def to_plain(value: Any) -> Any:
    """Convert a state value into a JSON-safe structure.

    Unordered collections become sorted lists and tuples become lists.
    """
    kind = node_kind(value)
    if kind is NodeKind.MAPPING:
        return {key: to_plain(child) for key, child in sorted(value.items())}
    if kind is NodeKind.SEQUENCE:
        return [to_plain(child) for child in value]
    if kind is NodeKind.COLLECTION:
        return sorted(value, key=element_sort_key)
    return value
