"""Change requests and a diff-only planner.

``DiffPlanner`` does not resolve dependencies. It compares the requested
units with the profile's installed units and emits one operand per change:
removals for installed units asked to go, updates when a unit with the same
id but another version is installed, additions for the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from provisio.domain.model import Operand, Status
from provisio.domain.plan import ProvisioningPlan

if TYPE_CHECKING:
    from collections.abc import Iterable

    from provisio.domain.engine.context import ProvisioningContext
    from provisio.domain.model import InstallableUnit, Profile

log = getLogger(__name__)


@dataclass(slots=True)
class ProfileChangeRequest:
    """Desired additions and removals for one profile."""

    profile: Profile
    additions: list[InstallableUnit] = field(default_factory=list["InstallableUnit"])
    removals: list[InstallableUnit] = field(default_factory=list["InstallableUnit"])

    def add_units(self, units: Iterable[InstallableUnit]) -> None:
        self.additions.extend(units)

    def remove_units(self, units: Iterable[InstallableUnit]) -> None:
        self.removals.extend(units)

    @property
    def is_empty(self) -> bool:
        return not self.additions and not self.removals


class DiffPlanner:
    def get_provisioning_plan(
        self,
        request: ProfileChangeRequest,
        context: ProvisioningContext | None = None,
    ) -> ProvisioningPlan:
        _ = context
        profile = request.profile
        status = Status(message=f"Plan for profile {profile.profile_id}")
        removals: dict[tuple[str, str], Operand] = {}

        for unit in request.removals:
            if not profile.has_unit(unit):
                status.add(Status.error(f"Cannot remove {unit}: not installed"))
                continue
            installed = next(u for u in profile.find(unit.id) if u.key == unit.key)
            removals.setdefault(unit.key, Operand(installed, None))

        changes: list[Operand] = []
        replaced: set[tuple[str, str]] = set()
        for unit in request.additions:
            if profile.has_unit(unit):
                status.add(Status.info(f"{unit} is already installed"))
                continue
            previous = next(
                (
                    installed
                    for installed in profile.find(unit.id)
                    if installed.key not in removals and installed.key not in replaced
                ),
                None,
            )
            if previous is not None:
                replaced.add(previous.key)
            changes.append(Operand(previous, unit))

        if status.is_failure:
            log.warning(
                "Plan for profile %s failed: %d problem(s)",
                profile.profile_id,
                len(status.failures()),
            )
            return ProvisioningPlan(status=status)
        return ProvisioningPlan(status=status, operands=(*removals.values(), *changes))
