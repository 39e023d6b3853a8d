"""Touchpoints and the registry the engine resolves them from.

A touchpoint translates the instructions a unit carries into concrete actions
for one kind of unit. The engine never names a touchpoint: each operand is
routed by its unit's ``touchpoint_type`` through a ``TouchpointRegistry``
that the hosting application builds and hands to the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import metadata
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from provisio.domain.engine.errors import TouchpointNotFoundError
from provisio.domain.model import TouchpointType

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping

    from provisio.domain.engine.action import ActionFactory, ProvisioningAction
    from provisio.domain.model import Operand, Profile, Status

ENTRY_POINT_GROUP = "provisio.touchpoints"

log = getLogger(__name__)


class Touchpoint:
    """Base touchpoint with no-op lifecycle hooks.

    Subclasses set ``type`` and may override any hook. ``actions`` returns the
    action factories this touchpoint contributes, keyed by unqualified id; the
    registry files them under ``<type id>.<action id>``.
    """

    type: ClassVar[TouchpointType] = TouchpointType.NONE

    def initialize_phase(
        self, profile: Profile, phase_id: str, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, phase_id, parameters)
        return None

    def complete_phase(
        self, profile: Profile, phase_id: str, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, phase_id, parameters)
        return None

    def initialize_operand(
        self, profile: Profile, operand: Operand, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, operand, parameters)
        return None

    def complete_operand(
        self, profile: Profile, operand: Operand, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, operand, parameters)
        return None

    def actions(self) -> Mapping[str, ActionFactory]:
        return {}

    def qualify_action(self, action_id: str) -> str:
        return f"{self.type.id}.{action_id}"


class NullTouchpoint(Touchpoint):
    """Touchpoint for units that declare no touchpoint type."""


@dataclass(slots=True)
class TouchpointRegistry:
    """Explicit lookup table for touchpoints and their actions."""

    _touchpoints: dict[str, Touchpoint] = field(default_factory=dict[str, Touchpoint])
    _actions: dict[str, ActionFactory] = field(default_factory=dict[str, "ActionFactory"])

    def __post_init__(self) -> None:
        if TouchpointType.NONE.id not in self._touchpoints:
            self._touchpoints[TouchpointType.NONE.id] = NullTouchpoint()

    def register_touchpoint(self, touchpoint: Touchpoint, *, replace: bool = False) -> None:
        type_id = touchpoint.type.id
        existing = self._touchpoints.get(type_id)
        if existing is not None and not replace and not isinstance(existing, NullTouchpoint):
            raise ValueError(f"Touchpoint already registered for type {type_id!r}")
        self._touchpoints[type_id] = touchpoint
        for action_id, factory in touchpoint.actions().items():
            self.register_action(touchpoint.qualify_action(action_id), factory, replace=replace)

    def register_action(
        self, action_id: str, factory: ActionFactory, *, replace: bool = False
    ) -> None:
        if "." not in action_id:
            raise ValueError(f"Action id must be qualified: {action_id!r}")
        if action_id in self._actions and not replace:
            raise ValueError(f"Action already registered: {action_id!r}")
        self._actions[action_id] = factory

    def find(self, touchpoint_type: TouchpointType) -> Touchpoint | None:
        return self._touchpoints.get(touchpoint_type.id)

    def touchpoint_for(self, touchpoint_type: TouchpointType) -> Touchpoint:
        touchpoint = self.find(touchpoint_type)
        if touchpoint is None:
            raise TouchpointNotFoundError(f"No touchpoint registered for type {touchpoint_type}")
        return touchpoint

    def action_for(self, action_id: str) -> ProvisioningAction | None:
        """Instantiate the action registered under ``action_id`` (if any)."""

        factory = self._actions.get(action_id)
        if factory is None:
            return None
        return factory()

    @property
    def touchpoints(self) -> tuple[Touchpoint, ...]:
        return tuple(self._touchpoints.values())

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register touchpoints advertised by installed distributions.

        Each entry point must resolve to a zero-argument callable (usually a
        ``Touchpoint`` subclass) returning a touchpoint instance.
        """

        loaded = 0
        for entry_point in metadata.entry_points(group=group):
            touchpoint = entry_point.load()()
            if not isinstance(touchpoint, Touchpoint):
                raise TypeError(
                    f"Entry point {entry_point.name!r} did not produce a Touchpoint: "
                    f"{type(touchpoint).__name__}"
                )
            self.register_touchpoint(touchpoint)
            log.debug("Registered touchpoint %s from %s", touchpoint.type, entry_point.value)
            loaded += 1
        return loaded
