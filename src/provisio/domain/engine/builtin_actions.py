"""Actions contributed by the standard phases themselves.

Each instance is created for one operand in one phase and remembers what its
``execute`` changed, so ``undo`` reverts exactly that and nothing else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from provisio.domain.engine.context import PARM_ARTIFACT_REQUESTS, PARM_PROFILE
from provisio.domain.model import Status
from provisio.domain.ports.artifacts import ArtifactRequest

if TYPE_CHECKING:
    from collections.abc import Mapping

    from provisio.domain.model import InstallableUnit, Profile


def _profile(parameters: Mapping[str, object]) -> Profile:
    return cast("Profile", parameters[PARM_PROFILE])


class AddUnitAction:
    """Mark ``unit`` as installed in the profile."""

    def __init__(self, unit: InstallableUnit) -> None:
        self.unit = unit
        self._added = False

    def execute(self, parameters: Mapping[str, object]) -> Status | None:
        self._added = _profile(parameters).add_unit(self.unit)
        if not self._added:
            return Status.info(f"{self.unit} was already installed")
        return None

    def undo(self, parameters: Mapping[str, object]) -> Status | None:
        if self._added:
            _profile(parameters).remove_unit(self.unit)
            self._added = False
        return None

    def __repr__(self) -> str:
        return f"AddUnitAction({self.unit})"


class RemoveUnitAction:
    """Drop ``unit`` from the profile's installed units."""

    def __init__(self, unit: InstallableUnit) -> None:
        self.unit = unit
        self._removed = False

    def execute(self, parameters: Mapping[str, object]) -> Status | None:
        self._removed = _profile(parameters).remove_unit(self.unit)
        if not self._removed:
            return Status.warning(f"{self.unit} was not installed")
        return None

    def undo(self, parameters: Mapping[str, object]) -> Status | None:
        if self._removed:
            _profile(parameters).add_unit(self.unit)
            self._removed = False
        return None

    def __repr__(self) -> str:
        return f"RemoveUnitAction({self.unit})"


class CollectArtifactsAction:
    """Queue one artifact request per artifact of ``unit``."""

    def __init__(self, unit: InstallableUnit) -> None:
        self.unit = unit
        self._requests: list[ArtifactRequest] = []

    def execute(self, parameters: Mapping[str, object]) -> Status | None:
        queue = parameters.get(PARM_ARTIFACT_REQUESTS)
        if not isinstance(queue, list):
            return Status.error(f"No artifact request queue available for {self.unit}")
        destination = _profile(parameters).cache_location
        for key in self.unit.artifacts:
            request = ArtifactRequest(key=key, unit=self.unit, destination=destination)
            cast("list[ArtifactRequest]", queue).append(request)
            self._requests.append(request)
        return None

    def undo(self, parameters: Mapping[str, object]) -> Status | None:
        queue = parameters.get(PARM_ARTIFACT_REQUESTS)
        if isinstance(queue, list):
            pending = cast("list[ArtifactRequest]", queue)
            for request in self._requests:
                if request in pending:
                    pending.remove(request)
        self._requests.clear()
        return None

    def __repr__(self) -> str:
        return f"CollectArtifactsAction({self.unit})"
