"""Planner port: turns a change request into a provisioning plan."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from provisio.domain.engine.context import ProvisioningContext
    from provisio.domain.plan import ProvisioningPlan
    from provisio.domain.planning import ProfileChangeRequest


@runtime_checkable
class Planner(Protocol):
    def get_provisioning_plan(
        self,
        request: ProfileChangeRequest,
        context: ProvisioningContext | None = None,
    ) -> ProvisioningPlan: ...
