"""Ports for handing collected artifact requests to a transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from provisio.domain.model import ArtifactKey, InstallableUnit, Profile, Status


@dataclass(frozen=True, slots=True, eq=False)
class ArtifactRequest:
    """Request to make ``key`` available at ``destination`` for ``unit``."""

    key: ArtifactKey
    unit: InstallableUnit
    destination: str | None = None


@runtime_checkable
class ArtifactCollector(Protocol):
    """Fetches artifacts gathered by the collect phase.

    Called once per run from the collect phase's completion hook; how the
    artifacts are transferred, cached or verified is up to the implementation.
    """

    def collect(self, requests: Sequence[ArtifactRequest], profile: Profile) -> Status | None: ...
