"""Transactional provisioning engine.

Phases run in order over every operand; the ``EngineSession`` records each
executed action so a failure anywhere can be undone in exact reverse order.
"""

from __future__ import annotations

from .action import ActionFactory, NullAction, ParameterizedAction, ProvisioningAction
from .builtin_actions import AddUnitAction, CollectArtifactsAction, RemoveUnitAction
from .cancellation import CancellationToken
from .context import (
    PARM_ARTIFACT_REQUESTS,
    PARM_CONTEXT,
    PARM_OPERAND,
    PARM_PHASE_ID,
    PARM_PROFILE,
    PARM_TOUCHPOINT,
    ProvisioningContext,
)
from .engine import Engine, ProgressCallback
from .errors import InstructionSyntaxError, SessionStateError, TouchpointNotFoundError
from .instructions import ActionStatement, parse_instruction
from .phase import InstallableUnitPhase, Phase, PhaseSet
from .phases import Collect, Configure, DefaultPhaseSet, Install, Uninstall, Unconfigure
from .session import ActionRecord, EngineSession, PhaseLedgerEntry
from .touchpoint import NullTouchpoint, Touchpoint, TouchpointRegistry

__all__ = [
    "PARM_ARTIFACT_REQUESTS",
    "PARM_CONTEXT",
    "PARM_OPERAND",
    "PARM_PHASE_ID",
    "PARM_PROFILE",
    "PARM_TOUCHPOINT",
    "ActionFactory",
    "ActionRecord",
    "ActionStatement",
    "AddUnitAction",
    "CancellationToken",
    "Collect",
    "CollectArtifactsAction",
    "Configure",
    "DefaultPhaseSet",
    "Engine",
    "EngineSession",
    "InstallableUnitPhase",
    "Install",
    "InstructionSyntaxError",
    "NullAction",
    "NullTouchpoint",
    "ParameterizedAction",
    "Phase",
    "PhaseLedgerEntry",
    "PhaseSet",
    "ProgressCallback",
    "ProvisioningAction",
    "ProvisioningContext",
    "RemoveUnitAction",
    "SessionStateError",
    "Touchpoint",
    "TouchpointNotFoundError",
    "TouchpointRegistry",
    "Unconfigure",
    "Uninstall",
    "parse_instruction",
]
