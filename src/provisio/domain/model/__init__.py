"""Domain model for provisioning: units, operands, profiles and outcomes."""

from __future__ import annotations

from .operand import Operand, OperandKind
from .profile import PROP_CACHE, PROP_ENVIRONMENTS, PROP_INSTALL_FOLDER, Profile
from .status import Severity, Status
from .units import (
    DEFAULT_VERSION,
    ArtifactKey,
    InstallableUnit,
    TouchpointInstruction,
    TouchpointType,
)

__all__ = [
    "DEFAULT_VERSION",
    "PROP_CACHE",
    "PROP_ENVIRONMENTS",
    "PROP_INSTALL_FOLDER",
    "ArtifactKey",
    "InstallableUnit",
    "Operand",
    "OperandKind",
    "Profile",
    "Severity",
    "Status",
    "TouchpointInstruction",
    "TouchpointType",
]
