"""JSON plan files: schema and translation into change requests."""

from __future__ import annotations

from .schema import PlanFilePayload, UnitPayload, UnitReferencePayload
from .translator import (
    PlanFileError,
    build_change_request,
    load_plan_file,
    parse_plan,
    parse_unit,
    resolve_removals,
)

__all__ = [
    "PlanFileError",
    "PlanFilePayload",
    "UnitPayload",
    "UnitReferencePayload",
    "build_change_request",
    "load_plan_file",
    "parse_plan",
    "parse_unit",
    "resolve_removals",
]
