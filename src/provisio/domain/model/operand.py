"""Operands: one unit transition handed to the engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from provisio.domain.model.units import InstallableUnit


class OperandKind(StrEnum):
    ADDITION = "addition"
    REMOVAL = "removal"
    UPDATE = "update"


@dataclass(frozen=True, slots=True, eq=False)
class Operand:
    """Transition from ``first`` to ``second``.

    Identity is by reference: two operands describing the same transition are
    still distinct entries in an engine session.
    """

    first: InstallableUnit | None = None
    second: InstallableUnit | None = None

    def __post_init__(self) -> None:
        if self.first is None and self.second is None:
            raise ValueError("Operand requires at least one of first or second")

    @property
    def kind(self) -> OperandKind:
        if self.first is None:
            return OperandKind.ADDITION
        if self.second is None:
            return OperandKind.REMOVAL
        return OperandKind.UPDATE

    @property
    def unit(self) -> InstallableUnit:
        """The unit whose metadata drives this transition (target if any)."""

        if self.second is not None:
            return self.second
        if self.first is not None:
            return self.first
        raise ValueError("Operand has neither first nor second unit")

    def __repr__(self) -> str:
        return f"Operand({self.first} -> {self.second})"
