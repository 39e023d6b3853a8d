"""Engine: drives a phase set over operands with all-or-nothing semantics."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from provisio.domain.engine.cancellation import CancellationToken
from provisio.domain.engine.session import EngineSession
from provisio.domain.engine.touchpoint import TouchpointRegistry
from provisio.domain.model import Status

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from provisio.domain.engine.context import ProvisioningContext
    from provisio.domain.engine.phase import Phase, PhaseSet
    from provisio.domain.model import Operand, Profile

type ProgressCallback = Callable[[str, float], None]

log = getLogger(__name__)


class Engine:
    """Apply operands to a profile phase by phase.

    For each phase: open it in the session, ``pre_perform``, run every operand,
    ``post_perform``, close it. The first failing status, an observed
    cancellation or an exception escaping a phase stops the run and rolls the
    session back; otherwise the session is committed. Escaping exceptions are
    re-raised once the rollback is done. Cancellation is checked between
    operands, before a phase completes and once more before committing.
    """

    def __init__(
        self,
        touchpoints: TouchpointRegistry | None = None,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._touchpoints = touchpoints or TouchpointRegistry()
        self._on_progress = on_progress

    @property
    def touchpoints(self) -> TouchpointRegistry:
        return self._touchpoints

    def perform(
        self,
        profile: Profile,
        phase_set: PhaseSet,
        operands: Sequence[Operand],
        context: ProvisioningContext | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Status:
        if profile is None:
            raise ValueError("Profile must not be None")
        if phase_set is None:
            raise ValueError("Phase set must not be None")
        operands = tuple(operands)
        token = cancellation or CancellationToken()
        session = EngineSession(profile, touchpoints=self._touchpoints, context=context)
        status = Status(message=f"Provisioning profile {profile.profile_id}")

        log.info(
            "Performing %s on profile %s with %d operand(s)",
            phase_set,
            profile.profile_id,
            len(operands),
        )
        try:
            for phase in phase_set:
                if token.is_cancelled:
                    status.add(Status.cancel(f"Cancelled before phase {phase.phase_id}"))
                    return self._rollback(session, status)
                if not self._perform_phase(phase, session, operands, token, status):
                    return self._rollback(session, status)
                self._report(phase.phase_id, phase_set.progress_after(phase))
            if token.is_cancelled:
                status.add(Status.cancel("Cancelled before commit"))
                return self._rollback(session, status)
        except BaseException:
            log.exception("Provisioning of profile %s interrupted", profile.profile_id)
            self._rollback(session, status)
            raise

        session.commit()
        log.info("Provisioning of profile %s finished: %s", profile.profile_id, status.severity.name)
        return status

    def _perform_phase(
        self,
        phase: Phase,
        session: EngineSession,
        operands: tuple[Operand, ...],
        token: CancellationToken,
        status: Status,
    ) -> bool:
        log.debug("Starting phase %s", phase.phase_id)
        session.record_phase_start(phase)
        phase.pre_perform(status, session)
        if status.is_failure:
            return False

        for operand in operands:
            if token.is_cancelled:
                status.add(Status.cancel(f"Cancelled during phase {phase.phase_id}"))
                return False
            phase.perform_operand(status, session, operand)
            if status.is_failure:
                return False

        if token.is_cancelled:
            status.add(Status.cancel(f"Cancelled before completing phase {phase.phase_id}"))
            return False
        phase.post_perform(status, session)
        if status.is_failure:
            return False
        session.record_phase_end(phase)
        log.debug("Completed phase %s", phase.phase_id)
        return True

    def _rollback(self, session: EngineSession, status: Status) -> Status:
        failed_in = session.current_phase.phase_id if session.current_phase else "between phases"
        log.warning("Provisioning failed (%s); rolling back", failed_in)
        rollback_status = session.rollback()
        if not rollback_status.is_ok:
            rollback_status.message = "Rollback reported problems"
            log.error("Rollback finished with %s", rollback_status.severity.name)
        status.merge(rollback_status)
        return status

    def _report(self, phase_id: str, fraction: float) -> None:
        log.debug("Progress after %s: %.0f%%", phase_id, fraction * 100)
        if self._on_progress is not None:
            self._on_progress(phase_id, fraction)
