from __future__ import annotations

import pytest

from provisio.domain.engine import (
    InstructionSyntaxError,
    NullAction,
    ParameterizedAction,
    parse_instruction,
)
from provisio.domain.engine.action import substitute
from tests.helpers.engine import EventLog, RecordingAction


def test_parse_single_statement_with_arguments() -> None:
    (statement,) = parse_instruction("mkdir(path:${installFolder}/bin)")

    assert statement.action_id == "mkdir"
    assert dict(statement.arguments) == {"path": "${installFolder}/bin"}
    assert not statement.is_qualified


def test_parse_multiple_statements_and_qualified_ids() -> None:
    statements = parse_instruction(
        "native.mkdir(path:/opt/x); native.chmod(targetDir:/opt/x, permissions:755);"
    )

    assert [s.action_id for s in statements] == ["native.mkdir", "native.chmod"]
    assert all(s.is_qualified for s in statements)
    assert dict(statements[1].arguments) == {"targetDir": "/opt/x", "permissions": "755"}


def test_parse_empty_arguments_and_blank_statements() -> None:
    statements = parse_instruction(" ; markStarted() ;; ")

    assert len(statements) == 1
    assert dict(statements[0].arguments) == {}


def test_argument_values_keep_colons_and_decode_escapes() -> None:
    (statement,) = parse_instruction("setProgramProperty(value:a${#59}b${#44}c, url:http://x)")

    assert statement.arguments["value"] == "a;b,c"
    assert statement.arguments["url"] == "http://x"


@pytest.mark.parametrize(
    "body",
    ["not a statement", "mkdir(path)", "mkdir(path:a, path:b)", "(path:a)"],
)
def test_malformed_instructions_raise(body: str) -> None:
    with pytest.raises(InstructionSyntaxError):
        parse_instruction(body)


def test_parameterized_action_overlays_and_substitutes(event_log: EventLog) -> None:
    inner = RecordingAction("copy", event_log)
    action = ParameterizedAction(inner, {"target": "${installFolder}/lib", "mode": "fast"})

    action.execute({"installFolder": "/opt/app", "mode": "slow"})

    (seen,) = inner.seen_parameters
    assert seen["target"] == "/opt/app/lib"
    assert seen["mode"] == "fast"
    assert seen["installFolder"] == "/opt/app"
    assert action.action is inner
    with pytest.raises(TypeError):
        action.arguments["mode"] = "other"  # type: ignore[index]


def test_parameterized_action_undo_uses_same_binding(event_log: EventLog) -> None:
    inner = RecordingAction("copy", event_log)
    action = ParameterizedAction(inner, {"target": "x"})

    action.execute({})
    action.undo({})

    assert event_log.events == ["execute:copy", "undo:copy"]


def test_substitute_leaves_unknown_variables() -> None:
    assert substitute("${known}-${unknown}", {"known": 1}) == "1-${unknown}"


def test_null_action_does_nothing() -> None:
    action = NullAction()

    assert action.execute({}) is None
    assert action.undo({}) is None
