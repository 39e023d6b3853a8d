"""Per-run options supplied by the caller of the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from provisio.domain.ports.artifacts import ArtifactCollector

PARM_PROFILE = "profile"
PARM_PHASE_ID = "phase_id"
PARM_CONTEXT = "context"
PARM_OPERAND = "operand"
PARM_TOUCHPOINT = "touchpoint"
PARM_ARTIFACT_REQUESTS = "artifact_requests"


@dataclass(slots=True)
class ProvisioningContext:
    """Options visible to every phase of one run through ``PARM_CONTEXT``."""

    properties: dict[str, str] = field(default_factory=dict[str, str])
    artifact_collector: ArtifactCollector | None = None

    def get_property(self, key: str, default: str | None = None) -> str | None:
        return self.properties.get(key, default)
