from __future__ import annotations

from typing import TYPE_CHECKING

from provisio.domain.engine import (
    DefaultPhaseSet,
    Engine,
    ProvisioningContext,
    TouchpointRegistry,
)
from provisio.domain.model import ArtifactKey, InstallableUnit, Operand, Status
from tests.helpers.engine import EchoTouchpoint, EventLog, make_profile, make_unit

if TYPE_CHECKING:
    from collections.abc import Sequence

    from provisio.domain.model import Profile
    from provisio.domain.ports import ArtifactRequest


class FakeCollector:
    def __init__(self, result: Status | None = None) -> None:
        self.calls: list[tuple[ArtifactRequest, ...]] = []
        self._result = result

    def collect(self, requests: Sequence[ArtifactRequest], profile: Profile) -> Status | None:
        _ = profile
        self.calls.append(tuple(requests))
        return self._result


def _unit_with_artifacts(unit_id: str, version: str = "1.0.0") -> InstallableUnit:
    return InstallableUnit(
        unit_id,
        version,
        artifacts=(ArtifactKey("binary", unit_id, version),),
    )


def test_default_phase_set_order_and_weights() -> None:
    phases = DefaultPhaseSet()

    assert [(p.phase_id, p.weight) for p in phases] == [
        ("collect", 100),
        ("unconfigure", 10),
        ("uninstall", 50),
        ("install", 50),
        ("configure", 10),
    ]


def test_install_adds_units_to_profile() -> None:
    profile = make_profile()
    unit = make_unit("org.example.tool")

    status = Engine().perform(profile, DefaultPhaseSet(), [Operand(None, unit)])

    assert status.is_ok
    assert profile.units() == (unit,)


def test_uninstall_removes_units_from_profile() -> None:
    unit = make_unit("org.example.tool")
    profile = make_profile("p", unit)

    status = Engine().perform(profile, DefaultPhaseSet(), [Operand(unit, None)])

    assert status.is_ok
    assert profile.units() == ()


def test_update_replaces_installed_version() -> None:
    old = make_unit("org.example.tool", "1.0.0")
    new = make_unit("org.example.tool", "2.0.0")
    profile = make_profile("p", old)

    status = Engine().perform(profile, DefaultPhaseSet(), [Operand(old, new)])

    assert status.is_ok
    assert profile.units() == (new,)


def test_failed_configure_restores_profile(event_log: EventLog) -> None:
    registry = TouchpointRegistry()
    registry.register_touchpoint(EchoTouchpoint(event_log))
    keep = make_unit("keep", "1.0.0")
    old = make_unit("tool", "1.0.0")
    new = make_unit(
        "tool",
        "2.0.0",
        touchpoint=EchoTouchpoint.type,
        instructions={"install": "say(text:installing)", "configure": "say(text:unterminated"},
    )
    profile = make_profile("p", keep, old)

    status = Engine(registry).perform(profile, DefaultPhaseSet(), [Operand(old, new)])

    assert status.is_failure
    assert profile.units() == (keep, old)
    assert event_log.events == ["say:installing", "unsay:installing"]


def test_collect_hands_requests_to_collector_once() -> None:
    collector = FakeCollector()
    profile = make_profile()
    units = [_unit_with_artifacts("a"), _unit_with_artifacts("b")]

    status = Engine().perform(
        profile,
        DefaultPhaseSet(),
        [Operand(None, unit) for unit in units],
        ProvisioningContext(artifact_collector=collector),
    )

    assert status.is_ok
    (requests,) = collector.calls
    assert [request.key.id for request in requests] == ["a", "b"]
    assert {request.destination for request in requests} == {"/opt/test"}


def test_collect_skips_removals_and_units_without_artifacts() -> None:
    collector = FakeCollector()
    installed = _unit_with_artifacts("gone")
    profile = make_profile("p", installed)

    Engine().perform(
        profile,
        DefaultPhaseSet(),
        [Operand(installed, None), Operand(None, make_unit("plain"))],
        ProvisioningContext(artifact_collector=collector),
    )

    assert collector.calls == []


def test_collector_failure_rolls_back_before_install() -> None:
    collector = FakeCollector(Status.error("mirror unreachable"))
    profile = make_profile()

    status = Engine().perform(
        profile,
        DefaultPhaseSet(),
        [Operand(None, _unit_with_artifacts("a"))],
        ProvisioningContext(artifact_collector=collector),
    )

    assert status.is_failure
    assert profile.units() == ()


def test_collect_without_collector_leaves_requests_pending() -> None:
    profile = make_profile()

    status = Engine().perform(
        profile, DefaultPhaseSet(), [Operand(None, _unit_with_artifacts("a"))]
    )

    assert status.is_ok
    assert len(profile.units()) == 1
