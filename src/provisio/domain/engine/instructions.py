"""Parse touchpoint instruction text into action statements.

Instruction bodies are ``;``-separated statements of the form
``action.id(name:value, other:value)``. Reserved characters inside values are
written as ``${#<decimal code>}``, e.g. ``${#59}`` for ``;``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from provisio.domain.engine.errors import InstructionSyntaxError

if TYPE_CHECKING:
    from collections.abc import Mapping

_STATEMENT = re.compile(r"^\s*([A-Za-z_][\w.\-]*)\s*\((.*)\)\s*$", re.DOTALL)
_ESCAPE = re.compile(r"\$\{#(\d+)\}")


@dataclass(frozen=True, slots=True)
class ActionStatement:
    action_id: str
    arguments: Mapping[str, str] = field(default_factory=dict[str, str])

    @property
    def is_qualified(self) -> bool:
        return "." in self.action_id


def parse_instruction(body: str) -> tuple[ActionStatement, ...]:
    """Split ``body`` into statements; blank statements are ignored."""

    statements: list[ActionStatement] = []
    for raw in body.split(";"):
        if not raw.strip():
            continue
        match = _STATEMENT.match(raw)
        if match is None:
            raise InstructionSyntaxError(f"Malformed instruction statement: {raw.strip()!r}")
        action_id, argument_text = match.groups()
        statements.append(
            ActionStatement(
                action_id=action_id,
                arguments=MappingProxyType(_parse_arguments(argument_text, action_id)),
            )
        )
    return tuple(statements)


def _parse_arguments(text: str, action_id: str) -> dict[str, str]:
    arguments: dict[str, str] = {}
    if not text.strip():
        return arguments
    for raw in text.split(","):
        name, separator, value = raw.partition(":")
        name = name.strip()
        if not separator or not name:
            raise InstructionSyntaxError(
                f"Malformed argument {raw.strip()!r} for action {action_id!r}"
            )
        if name in arguments:
            raise InstructionSyntaxError(f"Duplicate argument {name!r} for action {action_id!r}")
        arguments[name] = _unescape(value.strip())
    return arguments


def _unescape(value: str) -> str:
    return _ESCAPE.sub(lambda match: chr(int(match.group(1))), value)
