"""Installable units and the touchpoint metadata they carry.

Units are opaque to the engine apart from their identity, their touchpoint
type and the per-phase instructions stored in ``touchpoint_data``. Versions
are kept as plain strings; matching and ordering them is not our concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_VERSION = "0.0.0"


@dataclass(frozen=True, slots=True)
class TouchpointType:
    """Identifies the touchpoint implementation responsible for a unit."""

    id: str
    version: str = DEFAULT_VERSION

    NONE: ClassVar[TouchpointType]

    @property
    def is_null(self) -> bool:
        return self == TouchpointType.NONE

    def __str__(self) -> str:
        return f"{self.id} {self.version}"


TouchpointType.NONE = TouchpointType("null", DEFAULT_VERSION)


@dataclass(frozen=True, slots=True)
class TouchpointInstruction:
    """Instruction text for one phase, plus optional action imports.

    ``import_attribute`` is a comma separated list of fully qualified action
    ids that unqualified ids in ``body`` may refer to.
    """

    body: str
    import_attribute: str | None = None

    @property
    def imports(self) -> tuple[str, ...]:
        if not self.import_attribute:
            return ()
        return tuple(
            item.strip() for item in self.import_attribute.split(",") if item.strip()
        )


@dataclass(frozen=True, slots=True)
class ArtifactKey:
    classifier: str
    id: str
    version: str = DEFAULT_VERSION

    def __str__(self) -> str:
        return f"{self.classifier},{self.id},{self.version}"


@dataclass(frozen=True, slots=True, eq=False)
class InstallableUnit:
    """A versioned piece of software as seen by the provisioning engine.

    Equality and hashing use ``(id, version)`` only; two descriptions of the
    same unit with different metadata are considered the same unit.
    """

    id: str
    version: str = DEFAULT_VERSION
    touchpoint_type: TouchpointType = TouchpointType.NONE
    touchpoint_data: Mapping[str, TouchpointInstruction] = field(
        default_factory=dict[str, TouchpointInstruction]
    )
    artifacts: tuple[ArtifactKey, ...] = ()
    properties: Mapping[str, str] = field(default_factory=dict[str, str])

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Installable unit id must be a non-empty string")
        object.__setattr__(self, "touchpoint_data", MappingProxyType(dict(self.touchpoint_data)))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "artifacts", tuple(self.artifacts))

    @property
    def key(self) -> tuple[str, str]:
        return (self.id, self.version)

    def instruction(self, key: str) -> TouchpointInstruction | None:
        return self.touchpoint_data.get(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InstallableUnit):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.id} {self.version}"
