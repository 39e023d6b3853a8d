"""Transactional ledger of the actions one engine run has executed.

The session keeps the records of the phase currently open plus an
append-only list of completed phases. Rolling back walks both in reverse:
the open phase first, then completed phases from last to first; inside a
phase, action records from last to first; inside a record, actions from last
to first.

A new record starts whenever the operand differs from the one of the most
recent record, so an operand that recurs after another one gets a second
record. Undo therefore replays the exact execution order backwards instead
of regrouping actions per operand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from provisio.domain.engine.context import ProvisioningContext
from provisio.domain.engine.errors import SessionStateError
from provisio.domain.model import Status

if TYPE_CHECKING:
    from provisio.domain.engine.action import ProvisioningAction
    from provisio.domain.engine.phase import Phase
    from provisio.domain.engine.touchpoint import TouchpointRegistry
    from provisio.domain.model import Operand, Profile

log = getLogger(__name__)


@dataclass(slots=True)
class ActionRecord:
    """Consecutive actions executed for one operand."""

    operand: Operand
    actions: list[ProvisioningAction] = field(default_factory=list["ProvisioningAction"])


@dataclass(frozen=True, slots=True)
class PhaseLedgerEntry:
    phase: Phase
    records: list[ActionRecord]


class EngineSession:
    """Records executed actions for one ``Engine.perform`` call."""

    def __init__(
        self,
        profile: Profile,
        *,
        touchpoints: TouchpointRegistry,
        context: ProvisioningContext | None = None,
    ) -> None:
        self._profile = profile
        self._touchpoints = touchpoints
        self._context = context or ProvisioningContext()
        self._ledger: list[PhaseLedgerEntry] = []
        self._current_phase: Phase | None = None
        self._current_records: list[ActionRecord] | None = None
        self._current_record: ActionRecord | None = None

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def touchpoints(self) -> TouchpointRegistry:
        return self._touchpoints

    @property
    def context(self) -> ProvisioningContext:
        return self._context

    @property
    def current_phase(self) -> Phase | None:
        return self._current_phase

    @property
    def current_records(self) -> tuple[ActionRecord, ...]:
        return tuple(self._current_records or ())

    @property
    def ledger(self) -> tuple[PhaseLedgerEntry, ...]:
        return tuple(self._ledger)

    def record_phase_start(self, phase: Phase) -> None:
        if phase is None:
            raise ValueError("Phase must not be None")
        if self._current_phase is not None:
            raise SessionStateError(
                f"Phase {self._current_phase.phase_id!r} is already started"
            )
        self._current_phase = phase
        self._current_records = []
        self._current_record = None

    def record_action(self, action: ProvisioningAction, operand: Operand) -> None:
        if action is None or operand is None:
            raise ValueError("Action and operand must not be None")
        if self._current_records is None:
            raise SessionStateError("No phase is started")
        if self._current_record is None or self._current_record.operand is not operand:
            self._current_record = ActionRecord(operand)
            self._current_records.append(self._current_record)
        self._current_record.actions.append(action)

    def record_phase_end(self, phase: Phase) -> None:
        if self._current_phase is None or self._current_records is None:
            raise SessionStateError("There is no phase to end")
        if phase is not self._current_phase:
            raise ValueError(
                f"Phase {phase!r} does not match the started phase {self._current_phase!r}"
            )
        self._ledger.append(PhaseLedgerEntry(self._current_phase, self._current_records))
        self._clear_current()

    def commit(self) -> None:
        """Forget the ledger; nothing recorded so far can be undone afterwards."""

        self._ledger.clear()

    def rollback(self) -> Status:
        """Undo every recorded action, newest first.

        Failures while undoing are collected into the returned status and never
        stop the walk. The ledger is empty afterwards in every case.
        """

        result = Status()
        try:
            if self._current_phase is not None:
                log.warning("Rolling back open phase %s", self._current_phase.phase_id)
                result.merge(
                    self._rollback_phase(self._current_phase, self._current_records or [])
                )
                self._clear_current()
            for entry in reversed(self._ledger):
                log.warning("Rolling back phase %s", entry.phase.phase_id)
                result.merge(self._rollback_phase(entry.phase, entry.records))
        finally:
            self._clear_current()
            self._ledger.clear()
        return result

    def _rollback_phase(self, phase: Phase, records: list[ActionRecord]) -> Status:
        status = Status()
        if phase is not self._current_phase:
            # re-establish the phase setup the recorded actions ran under
            phase.pre_perform(status, self)
        for record in reversed(records):
            phase.undo(status, self, record.operand, record.actions)
        phase.post_perform(status, self)
        return status

    def _clear_current(self) -> None:
        self._current_phase = None
        self._current_records = None
        self._current_record = None
