"""Standard phases and the default phase set.

Order and weights: collect (100), unconfigure (10), uninstall (50),
install (50), configure (10). Phases acting on the unit being removed or
replaced read ``first``; the others read ``second``.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from provisio.domain.engine.builtin_actions import (
    AddUnitAction,
    CollectArtifactsAction,
    RemoveUnitAction,
)
from provisio.domain.engine.context import PARM_ARTIFACT_REQUESTS, PARM_CONTEXT
from provisio.domain.engine.phase import InstallableUnitPhase, PhaseSet

if TYPE_CHECKING:
    from collections.abc import MutableMapping, Sequence

    from provisio.domain.engine.action import ProvisioningAction
    from provisio.domain.engine.context import ProvisioningContext
    from provisio.domain.model import InstallableUnit, Operand, Profile, Status
    from provisio.domain.ports.artifacts import ArtifactRequest

log = getLogger(__name__)


class Collect(InstallableUnitPhase):
    """Gather artifact requests for incoming units and hand them off once."""

    def __init__(self, weight: int = 100) -> None:
        super().__init__("collect", weight)

    def is_applicable(self, operand: Operand) -> bool:
        return operand.second is not None

    def initialize_phase(
        self, profile: Profile, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = profile
        parameters[PARM_ARTIFACT_REQUESTS] = []
        return None

    def get_actions(self, operand: Operand) -> Sequence[ProvisioningAction] | None:
        unit = self.target_unit(operand)
        if unit is None:
            return None
        actions = self.actions_for(unit, self.phase_id)
        if actions or not unit.artifacts:
            return actions
        return [CollectArtifactsAction(unit)]

    def complete_phase(
        self, profile: Profile, parameters: MutableMapping[str, object]
    ) -> Status | None:
        requests = cast("list[ArtifactRequest]", parameters.get(PARM_ARTIFACT_REQUESTS) or [])
        if not requests:
            return None
        context = cast("ProvisioningContext", parameters[PARM_CONTEXT])
        if context.artifact_collector is None:
            log.info("No artifact collector configured; %d request(s) left pending", len(requests))
            return None
        log.info("Collecting %d artifact(s)", len(requests))
        return context.artifact_collector.collect(tuple(requests), profile)


class Unconfigure(InstallableUnitPhase):
    def __init__(self, weight: int = 10) -> None:
        super().__init__("unconfigure", weight)

    def is_applicable(self, operand: Operand) -> bool:
        return operand.first is not None

    def target_unit(self, operand: Operand) -> InstallableUnit | None:
        return operand.first


class Uninstall(InstallableUnitPhase):
    """Run uninstall instructions, then drop the unit from the profile."""

    def __init__(self, weight: int = 50) -> None:
        super().__init__("uninstall", weight)

    def is_applicable(self, operand: Operand) -> bool:
        return operand.first is not None

    def target_unit(self, operand: Operand) -> InstallableUnit | None:
        return operand.first

    def get_actions(self, operand: Operand) -> Sequence[ProvisioningAction] | None:
        unit = self.target_unit(operand)
        if unit is None:
            return None
        return [*self.actions_for(unit, self.phase_id), RemoveUnitAction(unit)]


class Install(InstallableUnitPhase):
    """Run install instructions, then record the unit in the profile."""

    def __init__(self, weight: int = 50) -> None:
        super().__init__("install", weight)

    def is_applicable(self, operand: Operand) -> bool:
        return operand.second is not None

    def get_actions(self, operand: Operand) -> Sequence[ProvisioningAction] | None:
        unit = self.target_unit(operand)
        if unit is None:
            return None
        return [*self.actions_for(unit, self.phase_id), AddUnitAction(unit)]


class Configure(InstallableUnitPhase):
    def __init__(self, weight: int = 10) -> None:
        super().__init__("configure", weight)

    def is_applicable(self, operand: Operand) -> bool:
        return operand.second is not None


class DefaultPhaseSet(PhaseSet):
    def __init__(self) -> None:
        super().__init__((Collect(), Unconfigure(), Uninstall(), Install(), Configure()))
