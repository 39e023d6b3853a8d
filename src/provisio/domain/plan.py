"""Read-only view over the operands a planner produced."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from provisio.domain.model import Status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from provisio.domain.model import InstallableUnit, Operand


@dataclass(frozen=True, slots=True)
class PlanView:
    """Units on one side of a plan's operands, in operand order."""

    units: tuple[InstallableUnit, ...] = ()

    def query(
        self, predicate: Callable[[InstallableUnit], bool] | None = None
    ) -> list[InstallableUnit]:
        if predicate is None:
            return list(self.units)
        return [unit for unit in self.units if predicate(unit)]

    def __iter__(self) -> Iterator[InstallableUnit]:
        return iter(self.units)

    def __len__(self) -> int:
        return len(self.units)


@dataclass(frozen=True, slots=True)
class ProvisioningPlan:
    """Planner outcome: a status plus the operands to hand to the engine.

    ``additions`` holds the incoming unit of every operand that has one
    (plain additions and updates); ``removals`` holds the outgoing unit of
    every operand that has one (plain removals and updates).
    """

    status: Status = field(default_factory=Status)
    operands: tuple[Operand, ...] = ()

    @classmethod
    def from_operands(cls, operands: Iterable[Operand], status: Status | None = None) -> ProvisioningPlan:
        return cls(status=status or Status(), operands=tuple(operands))

    @property
    def is_ok(self) -> bool:
        return not self.status.is_failure

    @property
    def additions(self) -> PlanView:
        return PlanView(tuple(op.second for op in self.operands if op.second is not None))

    @property
    def removals(self) -> PlanView:
        return PlanView(tuple(op.first for op in self.operands if op.first is not None))
