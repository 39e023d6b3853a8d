from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from provisio.adapters.plan_file import (
    PlanFileError,
    build_change_request,
    load_plan_file,
    parse_plan,
    parse_unit,
)
from provisio.adapters.plan_file.schema import UnitPayload
from provisio.domain.model import ArtifactKey, TouchpointInstruction, TouchpointType
from tests.helpers.engine import make_profile, make_unit

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_unit_builds_domain_unit() -> None:
    payload = UnitPayload.model_validate(
        {
            "id": "org.example.tool",
            "version": "1.2.0",
            "touchpoint": {"id": "native", "version": "1.0.0"},
            "instructions": {"install": {"body": "copy(target:/opt)", "import": "native.copy"}},
            "artifacts": [{"classifier": "binary", "id": "org.example.tool", "version": "1.2.0"}],
            "properties": {"license": "MIT"},
        }
    )

    unit = parse_unit(payload)

    assert unit.key == ("org.example.tool", "1.2.0")
    assert unit.touchpoint_type == TouchpointType("native", "1.0.0")
    assert unit.instruction("install") == TouchpointInstruction("copy(target:/opt)", "native.copy")
    assert unit.artifacts == (ArtifactKey("binary", "org.example.tool", "1.2.0"),)
    assert dict(unit.properties) == {"license": "MIT"}


def test_unit_without_touchpoint_uses_null_type() -> None:
    unit = parse_unit(UnitPayload(id="plain"))

    assert unit.touchpoint_type.is_null


def test_load_plan_file_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_text(json.dumps({"profile": "dev", "install": [{"id": "a"}]}), encoding="utf-8")

    payload = load_plan_file(path)

    assert payload.profile == "dev"
    assert [unit.id for unit in payload.install] == ["a"]


def test_missing_file_raises_plan_file_error(tmp_path: Path) -> None:
    with pytest.raises(PlanFileError, match="Cannot read"):
        load_plan_file(tmp_path / "missing.json")


@pytest.mark.parametrize("text", ["{not json", '{"install": {"id": "a"}}'])
def test_invalid_content_raises_plan_file_error(text: str) -> None:
    with pytest.raises(PlanFileError, match="Invalid plan file"):
        parse_plan(text)


def test_change_request_expands_unversioned_removals() -> None:
    profile = make_profile("dev", make_unit("old", "1.0.0"), make_unit("old", "1.1.0"))
    payload = parse_plan(
        json.dumps(
            {
                "install": [{"id": "new", "version": "2.0.0"}],
                "uninstall": ["old", {"id": "ghost", "version": "9.9.9"}, "absent"],
            }
        )
    )

    request = build_change_request(payload, profile)

    assert [unit.key for unit in request.additions] == [("new", "2.0.0")]
    assert [unit.key for unit in request.removals] == [
        ("old", "1.0.0"),
        ("old", "1.1.0"),
        ("ghost", "9.9.9"),
        ("absent", "0.0.0"),
    ]
    assert request.profile is profile
