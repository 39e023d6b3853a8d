"""Director: plan a change request, then hand the plan to the engine."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from provisio.domain.engine.phases import DefaultPhaseSet
from provisio.domain.model import Status

if TYPE_CHECKING:
    from collections.abc import Callable

    from provisio.domain.engine.cancellation import CancellationToken
    from provisio.domain.engine.context import ProvisioningContext
    from provisio.domain.engine.engine import Engine
    from provisio.domain.engine.phase import PhaseSet
    from provisio.domain.plan import ProvisioningPlan
    from provisio.domain.planning import ProfileChangeRequest
    from provisio.domain.ports.planning import Planner

log = getLogger(__name__)


class Director:
    """Runs a planner and, when the plan holds, the engine.

    Plans carrying only informational or warning children are applied; a plan
    reporting an error or cancellation is returned as-is and the engine never
    sees it.
    """

    def __init__(
        self,
        engine: Engine,
        planner: Planner,
        phase_set_factory: Callable[[], PhaseSet] = DefaultPhaseSet,
    ) -> None:
        self._engine = engine
        self._planner = planner
        self._phase_set_factory = phase_set_factory

    def plan(
        self,
        request: ProfileChangeRequest,
        context: ProvisioningContext | None = None,
    ) -> ProvisioningPlan:
        return self._planner.get_provisioning_plan(request, context)

    def provision(
        self,
        request: ProfileChangeRequest,
        context: ProvisioningContext | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Status:
        profile_id = request.profile.profile_id
        plan = self.plan(request, context)
        if not plan.is_ok:
            log.error("Refusing to provision %s: %s", profile_id, plan.status)
            return plan.status
        if not plan.operands:
            log.info("Nothing to do for profile %s", profile_id)
            status = Status(message=f"Provisioning profile {profile_id}")
            status.merge(plan.status)
            return status

        status = self._engine.perform(
            request.profile,
            self._phase_set_factory(),
            plan.operands,
            context,
            cancellation,
        )
        status.merge(plan.status)
        return status
