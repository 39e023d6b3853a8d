"""Provisioning actions: the smallest reversible unit of work."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from provisio.domain.model import Status

_VARIABLE = re.compile(r"\$\{([^}#][^}]*)\}")


@runtime_checkable
class ProvisioningAction(Protocol):
    """Contract implemented by touchpoint actions.

    Both methods receive the read-only parameter mapping of the operand being
    processed. Returning ``None`` means success.
    """

    def execute(self, parameters: Mapping[str, object]) -> Status | None: ...

    def undo(self, parameters: Mapping[str, object]) -> Status | None: ...


type ActionFactory = Callable[[], ProvisioningAction]


class NullAction:
    """Stands in for instructions that resolve to no known action."""

    def execute(self, parameters: Mapping[str, object]) -> Status | None:
        _ = parameters
        return None

    def undo(self, parameters: Mapping[str, object]) -> Status | None:
        _ = parameters
        return None

    def __repr__(self) -> str:
        return "NullAction()"


class ParameterizedAction:
    """Binds instruction arguments to an action.

    Arguments are overlaid on the operand parameters before each call;
    ``${name}`` references inside argument values are filled from those
    parameters and left untouched when no such parameter exists.
    """

    __slots__ = ("_action", "_arguments")

    def __init__(self, action: ProvisioningAction, arguments: Mapping[str, str]) -> None:
        self._action = action
        self._arguments = dict(arguments)

    @property
    def action(self) -> ProvisioningAction:
        return self._action

    @property
    def arguments(self) -> Mapping[str, str]:
        return MappingProxyType(self._arguments)

    def execute(self, parameters: Mapping[str, object]) -> Status | None:
        return self._action.execute(self._bind(parameters))

    def undo(self, parameters: Mapping[str, object]) -> Status | None:
        return self._action.undo(self._bind(parameters))

    def _bind(self, parameters: Mapping[str, object]) -> Mapping[str, object]:
        bound: dict[str, object] = dict(parameters)
        for name, value in self._arguments.items():
            bound[name] = substitute(value, parameters)
        return MappingProxyType(bound)

    def __repr__(self) -> str:
        return f"ParameterizedAction({self._action!r}, {self._arguments!r})"


def substitute(value: str, parameters: Mapping[str, object]) -> str:
    """Replace ``${name}`` references in ``value`` with parameter values."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in parameters:
            return match.group(0)
        return str(parameters[name])

    return _VARIABLE.sub(_replace, value)
