"""Pydantic models describing JSON plan files and unit descriptions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from provisio.domain.model import DEFAULT_VERSION


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PlanFileBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class TouchpointPayload(PlanFileBaseModel):
    id: str = Field(min_length=1)
    version: str = DEFAULT_VERSION


class InstructionPayload(PlanFileBaseModel):
    body: str
    import_: str | None = Field(default=None, alias="import")

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_body(cls, value: object) -> object:
        if isinstance(value, str):
            return {"body": value}
        return value

    _normalize_import = field_validator("import_", mode="before")(_blank_to_none)


class ArtifactPayload(PlanFileBaseModel):
    classifier: str = Field(min_length=1)
    id: str = Field(min_length=1)
    version: str = DEFAULT_VERSION


class UnitPayload(PlanFileBaseModel):
    id: str = Field(min_length=1)
    version: str = DEFAULT_VERSION
    touchpoint: TouchpointPayload | None = None
    instructions: dict[str, InstructionPayload] = Field(default_factory=dict[str, InstructionPayload])
    artifacts: list[ArtifactPayload] = Field(default_factory=list[ArtifactPayload])
    properties: dict[str, str] = Field(default_factory=dict[str, str])

    @field_validator("id")
    @classmethod
    def _strip_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("unit id must not be blank")
        return stripped


class UnitReferencePayload(PlanFileBaseModel):
    """A unit named for removal: either ``"id"`` or ``{"id", "version"}``.

    Without a version the reference matches every installed version.
    """

    id: str = Field(min_length=1)
    version: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_id(cls, value: object) -> object:
        if isinstance(value, str):
            return {"id": value}
        if isinstance(value, Mapping):
            return dict(cast(Mapping[str, object], value))
        return value


class PlanFilePayload(PlanFileBaseModel):
    profile: str | None = None
    install: list[UnitPayload] = Field(default_factory=list[UnitPayload])
    uninstall: list[UnitReferencePayload] = Field(default_factory=list[UnitReferencePayload])

    _normalize_profile = field_validator("profile", mode="before")(_blank_to_none)
