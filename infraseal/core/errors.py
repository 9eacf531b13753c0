"""Exceptions raised by the InfraSeal engine and its loaders."""
from __future__ import annotations

from typing import Any, Tuple


class InfraSealError(Exception):
    """Base exception for all InfraSeal errors."""


class InvalidStateError(InfraSealError):
    """A state tree holds a value outside the supported node types."""

    def __init__(self, path: Tuple = (), message: str = "", value: Any = None):
        from infraseal.core.state import format_path

        self.path = tuple(path)
        self.value = value
        where = format_path(self.path) or "<root>"
        super().__init__(f"{message or 'Invalid state value'} at {where}")


class CyclicStateError(InvalidStateError):
    """A state tree contains a reference cycle."""

    def __init__(self, path: Tuple = ()):
        super().__init__(path, "Reference cycle detected")


class StateDepthError(InvalidStateError):
    """A state tree is nested deeper than the configured limit."""

    def __init__(self, path: Tuple = (), max_depth: int = 0):
        self.max_depth = max_depth
        super().__init__(path, f"State nested deeper than {max_depth} levels")


class InvalidRuleSetError(InfraSealError):
    """The classification rule set cannot resolve every divergence."""


class InvalidThresholdError(InfraSealError):
    """The recommendation threshold table is malformed."""


class PolicyError(InfraSealError):
    """A policy file could not be loaded or validated."""


class StateFileError(InfraSealError):
    """A state file could not be read or parsed."""


class ConfigurationError(InfraSealError):
    """A runtime setting from the environment is invalid."""
