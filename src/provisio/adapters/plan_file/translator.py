"""Translate plan file payloads into domain units and change requests."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from provisio.domain.model import (
    ArtifactKey,
    InstallableUnit,
    TouchpointInstruction,
    TouchpointType,
)
from provisio.domain.planning import ProfileChangeRequest

from .schema import PlanFilePayload, UnitPayload, UnitReferencePayload

if TYPE_CHECKING:
    from provisio.domain.model import Profile

log = getLogger(__name__)


class PlanFileError(ValueError):
    """Raised when a plan file cannot be read or does not validate."""


def load_plan_file(path: str | Path) -> PlanFilePayload:
    plan_path = Path(path)
    try:
        text = plan_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlanFileError(f"Cannot read plan file {plan_path}: {exc}") from exc
    return parse_plan(text, source=str(plan_path))


def parse_plan(text: str, *, source: str = "<string>") -> PlanFilePayload:
    try:
        payload = PlanFilePayload.model_validate_json(text)
    except ValidationError as exc:
        raise PlanFileError(f"Invalid plan file {source}: {exc}") from exc
    log.debug(
        "Loaded plan %s: %d install, %d uninstall",
        source,
        len(payload.install),
        len(payload.uninstall),
    )
    return payload


def parse_unit(payload: UnitPayload) -> InstallableUnit:
    touchpoint = (
        TouchpointType(payload.touchpoint.id, payload.touchpoint.version)
        if payload.touchpoint is not None
        else TouchpointType.NONE
    )
    return InstallableUnit(
        id=payload.id,
        version=payload.version,
        touchpoint_type=touchpoint,
        touchpoint_data={
            phase_id: TouchpointInstruction(body=instruction.body, import_attribute=instruction.import_)
            for phase_id, instruction in payload.instructions.items()
        },
        artifacts=tuple(
            ArtifactKey(artifact.classifier, artifact.id, artifact.version)
            for artifact in payload.artifacts
        ),
        properties=payload.properties,
    )


def resolve_removals(
    references: list[UnitReferencePayload], profile: Profile
) -> list[InstallableUnit]:
    """Map removal references to units.

    A reference without a version expands to every installed version of the
    id. References that match nothing are kept as bare units so the planner
    reports them.
    """

    units: list[InstallableUnit] = []
    for reference in references:
        if reference.version is not None:
            units.append(InstallableUnit(reference.id, reference.version))
            continue
        installed = profile.find(reference.id)
        if installed:
            units.extend(installed)
        else:
            units.append(InstallableUnit(reference.id))
    return units


def build_change_request(payload: PlanFilePayload, profile: Profile) -> ProfileChangeRequest:
    request = ProfileChangeRequest(profile)
    request.add_units(parse_unit(unit) for unit in payload.install)
    request.remove_units(resolve_removals(payload.uninstall, profile))
    return request
