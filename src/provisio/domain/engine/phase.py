"""Phases: named, weighted stages every operand passes through.

A phase brackets its whole batch with ``initialize_phase``/``complete_phase``
and each operand with ``initialize_operand``/``complete_operand``. The engine
drives the batch through ``pre_perform``, ``perform_operand`` and
``post_perform``; the session replays ``pre_perform``, ``undo`` and
``post_perform`` when it rolls a phase back.

Parameter scoping:

* the phase mapping is created in ``pre_perform`` and holds ``profile``,
  ``phase_id`` and ``context``; phase hooks and touchpoint phase hooks write
  to it directly;
* every operand gets a fresh copy of the phase mapping plus ``operand`` and
  ``touchpoint``, so values written for one operand never reach the next;
* actions only ever see a read-only view of the operand mapping.

Any exception raised by a hook or an action is turned into an ERROR status so
the engine can stop and roll back like for any other failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from provisio.domain.engine.action import NullAction, ParameterizedAction
from provisio.domain.engine.context import (
    PARM_CONTEXT,
    PARM_OPERAND,
    PARM_PHASE_ID,
    PARM_PROFILE,
    PARM_TOUCHPOINT,
)
from provisio.domain.engine.instructions import parse_instruction
from provisio.domain.model import Status

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence

    from provisio.domain.engine.action import ProvisioningAction
    from provisio.domain.engine.session import EngineSession
    from provisio.domain.engine.touchpoint import Touchpoint, TouchpointRegistry
    from provisio.domain.model import InstallableUnit, Operand, Profile, TouchpointInstruction

log = getLogger(__name__)


class Phase(ABC):
    """One stage of a provisioning run."""

    def __init__(self, phase_id: str, weight: int) -> None:
        if not isinstance(phase_id, str) or not phase_id.strip():
            raise ValueError("Phase id must be a non-empty string")
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise ValueError(f"Phase weight must be a positive integer, got {weight!r}")
        self._phase_id = phase_id
        self._weight = weight
        self._phase_parameters: dict[str, object] | None = None
        self._touchpoints: TouchpointRegistry | None = None

    @property
    def phase_id(self) -> str:
        return self._phase_id

    @property
    def weight(self) -> int:
        return self._weight

    @property
    def touchpoints(self) -> TouchpointRegistry:
        if self._touchpoints is None:
            raise RuntimeError(f"Phase {self._phase_id!r} is not being performed")
        return self._touchpoints

    # Hooks -----------------------------------------------------------------

    def initialize_phase(
        self, profile: Profile, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, parameters)
        return None

    def complete_phase(
        self, profile: Profile, parameters: MutableMapping[str, object]
    ) -> Status | None:
        _ = (profile, parameters)
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

    def is_applicable(self, operand: Operand) -> bool:
        _ = operand
        return True

    @abstractmethod
    def get_actions(self, operand: Operand) -> Sequence[ProvisioningAction] | None:
        """Return the actions to execute for ``operand`` in this phase."""

    def touchpoint_for(self, operand: Operand) -> Touchpoint | None:
        return self.touchpoints.find(operand.unit.touchpoint_type)

    # Lifecycle driven by the engine and the session ---------------------------

    def pre_perform(self, status: Status, session: EngineSession) -> None:
        parameters = self._bind(session)
        _call_hook(status, "initialize_phase", self.initialize_phase, session.profile, parameters)
        for touchpoint in session.touchpoints.touchpoints:
            _call_hook(
                status,
                f"{touchpoint.type.id}.initialize_phase",
                touchpoint.initialize_phase,
                session.profile,
                self._phase_id,
                parameters,
            )

    def perform_operand(self, status: Status, session: EngineSession, operand: Operand) -> None:
        """Run one operand: initialize, execute and record actions, complete."""

        try:
            if not self.is_applicable(operand):
                return
            actions = list(self.get_actions(operand) or ())
            touchpoint = self.touchpoint_for(operand)
        except Exception as exc:
            log.exception("Could not derive %s actions for %r", self._phase_id, operand)
            status.add(Status.error(f"Could not derive {self._phase_id} actions for {operand}", exc))
            return

        profile = session.profile
        parameters = self._operand_parameters(operand, touchpoint)
        if not self._initialize_operand(status, profile, operand, touchpoint, parameters):
            return

        view = MappingProxyType(parameters)
        for action in actions:
            result = _call_action(action.execute, view, f"{self._phase_id} {action!r}")
            if result is not None and not result.is_ok:
                status.add(result)
                if result.is_failure:
                    return
            session.record_action(action, operand)

        self._complete_operand(status, profile, operand, touchpoint, parameters)

    def undo(
        self,
        status: Status,
        session: EngineSession,
        operand: Operand,
        actions: Sequence[ProvisioningAction],
    ) -> None:
        """Undo ``actions`` for ``operand`` in reverse order.

        Undo is best effort: failures are collected into ``status`` and the
        remaining actions are still undone.
        """

        if self._phase_parameters is None:
            # post_perform already ran for a phase whose completion failed
            self._bind(session)
        profile = session.profile
        try:
            touchpoint = self.touchpoint_for(operand)
        except Exception as exc:
            log.exception("Cannot undo %s for %r", self._phase_id, operand)
            status.add(Status.error(f"Cannot undo {self._phase_id} for {operand}", exc))
            return
        parameters = self._operand_parameters(operand, touchpoint)
        self._initialize_operand(status, profile, operand, touchpoint, parameters)

        view = MappingProxyType(parameters)
        for action in reversed(actions):
            result = _call_action(action.undo, view, f"undo {self._phase_id} {action!r}")
            if result is not None and not result.is_ok:
                log.error("Undo of %r for %r reported %s", action, operand, result)
                status.add(result)

        self._complete_operand(status, profile, operand, touchpoint, parameters)

    def post_perform(self, status: Status, session: EngineSession) -> None:
        parameters = self._phase_parameters if self._phase_parameters is not None else {}
        for touchpoint in session.touchpoints.touchpoints:
            _call_hook(
                status,
                f"{touchpoint.type.id}.complete_phase",
                touchpoint.complete_phase,
                session.profile,
                self._phase_id,
                parameters,
            )
        _call_hook(status, "complete_phase", self.complete_phase, session.profile, parameters)
        self._phase_parameters = None
        self._touchpoints = None

    # Internals ---------------------------------------------------------------

    def _bind(self, session: EngineSession) -> dict[str, object]:
        self._touchpoints = session.touchpoints
        parameters: dict[str, object] = {
            PARM_PROFILE: session.profile,
            PARM_PHASE_ID: self._phase_id,
            PARM_CONTEXT: session.context,
        }
        self._phase_parameters = parameters
        return parameters

    def _operand_parameters(
        self, operand: Operand, touchpoint: Touchpoint | None
    ) -> dict[str, object]:
        parameters = dict(self._phase_parameters or {})
        parameters[PARM_OPERAND] = operand
        parameters[PARM_TOUCHPOINT] = touchpoint
        return parameters

    def _initialize_operand(
        self,
        status: Status,
        profile: Profile,
        operand: Operand,
        touchpoint: Touchpoint | None,
        parameters: dict[str, object],
    ) -> bool:
        outcome = Status()
        _call_hook(
            outcome, "initialize_operand", self.initialize_operand, profile, operand, parameters
        )
        if touchpoint is not None:
            _call_hook(
                outcome,
                f"{touchpoint.type.id}.initialize_operand",
                touchpoint.initialize_operand,
                profile,
                operand,
                parameters,
            )
        status.merge(outcome)
        return not outcome.is_failure

    def _complete_operand(
        self,
        status: Status,
        profile: Profile,
        operand: Operand,
        touchpoint: Touchpoint | None,
        parameters: dict[str, object],
    ) -> None:
        if touchpoint is not None:
            _call_hook(
                status,
                f"{touchpoint.type.id}.complete_operand",
                touchpoint.complete_operand,
                profile,
                operand,
                parameters,
            )
        _call_hook(status, "complete_operand", self.complete_operand, profile, operand, parameters)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(phase_id={self._phase_id!r}, weight={self._weight})"


class InstallableUnitPhase(Phase):
    """Phase whose actions come from the instructions a unit carries.

    By default the instruction stored under this phase's id on the operand's
    target unit (``second``) is used; phases that act on the unit being
    replaced or removed override ``target_unit``.
    """

    def target_unit(self, operand: Operand) -> InstallableUnit | None:
        return operand.second

    def get_actions(self, operand: Operand) -> Sequence[ProvisioningAction] | None:
        unit = self.target_unit(operand)
        if unit is None:
            return None
        return self.actions_for(unit, self.phase_id)

    def touchpoint_for(self, operand: Operand) -> Touchpoint | None:
        unit = self.target_unit(operand) or operand.unit
        return self.touchpoints.find(unit.touchpoint_type)

    def actions_for(self, unit: InstallableUnit, key: str) -> list[ProvisioningAction]:
        """Resolve the instruction stored under ``key`` into actions.

        Statements naming no registered action become ``NullAction`` so that
        instructions meant for other tools never block a run.
        """

        instruction = unit.instruction(key)
        if instruction is None:
            return []
        touchpoint = self.touchpoints.touchpoint_for(unit.touchpoint_type)
        actions: list[ProvisioningAction] = []
        for statement in parse_instruction(instruction.body):
            action_id = _qualify(statement.action_id, instruction, touchpoint)
            action = self.touchpoints.action_for(action_id)
            if action is None:
                log.debug("No action registered for %s (unit %s); using no-op", action_id, unit)
                action = NullAction()
            actions.append(ParameterizedAction(action, statement.arguments))
        return actions


class PhaseSet:
    """Ordered, non-empty sequence of phases run for one engine call."""

    def __init__(self, phases: Iterable[Phase]) -> None:
        self._phases = tuple(phases)
        if not self._phases:
            raise ValueError("Phase set must contain at least one phase")

    @property
    def phases(self) -> tuple[Phase, ...]:
        return self._phases

    @property
    def total_weight(self) -> int:
        return sum(phase.weight for phase in self._phases)

    def progress_after(self, phase: Phase) -> float:
        """Fraction of the total weight completed once ``phase`` has finished."""

        done = 0
        for candidate in self._phases:
            done += candidate.weight
            if candidate is phase:
                return done / self.total_weight
        raise ValueError(f"{phase!r} is not part of this phase set")

    def __iter__(self) -> Iterator[Phase]:
        return iter(self._phases)

    def __len__(self) -> int:
        return len(self._phases)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(p.phase_id for p in self._phases)})"


def _qualify(action_id: str, instruction: TouchpointInstruction, touchpoint: Touchpoint) -> str:
    if "." in action_id:
        return action_id
    for imported in instruction.imports:
        if imported.rsplit(".", 1)[-1] == action_id:
            return imported
    return touchpoint.qualify_action(action_id)


def _call_hook(
    status: Status, name: str, hook: Callable[..., Status | None], *args: object
) -> None:
    try:
        result = hook(*args)
    except Exception as exc:
        log.exception("Hook %s raised", name)
        status.add(Status.error(f"{name} failed: {exc}", exc))
        return
    status.merge(result)


def _call_action(
    call: Callable[[MappingProxyType[str, object]], Status | None],
    parameters: MappingProxyType[str, object],
    description: str,
) -> Status | None:
    try:
        return call(parameters)
    except Exception as exc:
        log.exception("Action %s raised", description)
        return Status.error(f"{description} failed: {exc}", exc)
