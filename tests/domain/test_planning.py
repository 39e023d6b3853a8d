from __future__ import annotations

from provisio.domain.model import OperandKind, Severity
from provisio.domain.planning import DiffPlanner, ProfileChangeRequest
from tests.helpers.engine import make_profile, make_unit


def test_new_units_become_additions() -> None:
    profile = make_profile()
    request = ProfileChangeRequest(profile, additions=[make_unit("a"), make_unit("b")])

    plan = DiffPlanner().get_provisioning_plan(request)

    assert plan.is_ok
    assert [op.kind for op in plan.operands] == [OperandKind.ADDITION, OperandKind.ADDITION]


def test_other_installed_version_becomes_update() -> None:
    old = make_unit("a", "1.0.0")
    new = make_unit("a", "2.0.0")
    request = ProfileChangeRequest(make_profile("p", old), additions=[new])

    plan = DiffPlanner().get_provisioning_plan(request)

    (operand,) = plan.operands
    assert operand.kind is OperandKind.UPDATE
    assert operand.first is old
    assert operand.second is new


def test_removals_come_first_and_are_deduplicated() -> None:
    installed = make_unit("x", "1.0.0")
    request = ProfileChangeRequest(
        make_profile("p", installed),
        additions=[make_unit("y")],
        removals=[make_unit("x", "1.0.0"), make_unit("x", "1.0.0")],
    )

    plan = DiffPlanner().get_provisioning_plan(request)

    assert [op.kind for op in plan.operands] == [OperandKind.REMOVAL, OperandKind.ADDITION]
    assert plan.operands[0].first is installed


def test_removed_unit_is_not_used_as_update_source() -> None:
    installed = make_unit("x", "1.0.0")
    request = ProfileChangeRequest(
        make_profile("p", installed),
        additions=[make_unit("x", "2.0.0")],
        removals=[installed],
    )

    plan = DiffPlanner().get_provisioning_plan(request)

    assert [op.kind for op in plan.operands] == [OperandKind.REMOVAL, OperandKind.ADDITION]


def test_removing_absent_unit_fails_the_plan() -> None:
    request = ProfileChangeRequest(make_profile(), removals=[make_unit("ghost")])

    plan = DiffPlanner().get_provisioning_plan(request)

    assert not plan.is_ok
    assert plan.status.severity is Severity.ERROR
    assert plan.operands == ()


def test_already_installed_unit_is_reported_not_planned() -> None:
    unit = make_unit("a")
    request = ProfileChangeRequest(make_profile("p", unit), additions=[make_unit("a")])

    plan = DiffPlanner().get_provisioning_plan(request)

    assert plan.is_ok
    assert plan.operands == ()
    assert plan.status.severity is Severity.INFO


def test_change_request_helpers() -> None:
    request = ProfileChangeRequest(make_profile())

    assert request.is_empty

    request.add_units([make_unit("a")])
    request.remove_units([make_unit("b")])

    assert not request.is_empty
