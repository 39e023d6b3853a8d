"""Engine error definitions."""

from __future__ import annotations


class SessionStateError(RuntimeError):
    """Raised when engine session calls arrive out of protocol order."""


class TouchpointNotFoundError(LookupError):
    """Raised when a unit names a touchpoint type nobody registered."""


class InstructionSyntaxError(ValueError):
    """Raised when touchpoint instruction text cannot be parsed."""
