from __future__ import annotations

from provisio.domain.model import Operand, Status
from provisio.domain.plan import ProvisioningPlan
from tests.helpers.engine import make_unit


def test_addition_only_plan() -> None:
    a = make_unit("a")

    plan = ProvisioningPlan.from_operands([Operand(None, a)])

    assert plan.additions.query() == [a]
    assert len(plan.removals) == 0


def test_removal_only_plan() -> None:
    a = make_unit("a")

    plan = ProvisioningPlan.from_operands([Operand(a, None)])

    assert len(plan.additions) == 0
    assert plan.removals.query() == [a]


def test_update_counts_as_one_addition_and_one_removal() -> None:
    a = make_unit("a", "1.0.0")
    b = make_unit("a", "2.0.0")

    plan = ProvisioningPlan.from_operands([Operand(a, b)])

    assert plan.additions.query() == [b]
    assert plan.removals.query() == [a]


def test_query_filters_with_predicate() -> None:
    units = [make_unit("lib.a"), make_unit("app.b"), make_unit("lib.c")]

    plan = ProvisioningPlan.from_operands(Operand(None, unit) for unit in units)

    assert [u.id for u in plan.additions.query(lambda u: u.id.startswith("lib."))] == [
        "lib.a",
        "lib.c",
    ]
    assert list(plan.additions) == units


def test_plan_status_decides_is_ok() -> None:
    failed = Status(message="plan")
    failed.add(Status.error("conflict"))

    assert ProvisioningPlan().is_ok
    assert not ProvisioningPlan(status=failed).is_ok
