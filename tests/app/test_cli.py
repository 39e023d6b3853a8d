from __future__ import annotations

from signal import SIGINT

import pytest

from provisio.domain.engine import CancellationToken
from provisio.domain.model import Profile, Status
from provisio.ui import cli
from tests.helpers.engine import make_profile, make_unit


def test_profile_create_passes_properties(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create(profile_id: str, properties: dict[str, str]) -> Profile:
        captured["profile_id"] = profile_id
        captured["properties"] = properties
        return Profile(profile_id=profile_id, properties=properties)

    monkeypatch.setattr(cli, "create_profile", fake_create)

    cli.main(
        [
            "profile",
            "create",
            "--id",
            "dev",
            "--property",
            "provisio.installFolder=/opt/dev",
            "--property",
            "note=a=b",
        ]
    )

    assert captured == {
        "profile_id": "dev",
        "properties": {"provisio.installFolder": "/opt/dev", "note": "a=b"},
    }


def test_invalid_property_exits_with_validation_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "create_profile", lambda *_: pytest.fail("must not be called"))

    with pytest.raises(SystemExit) as exc:
        cli.main(["profile", "create", "--id", "dev", "--property", "novalue"])

    assert exc.value.code == 2


def test_missing_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main([])

    assert exc.value.code == 2


def test_profile_show_prints_units(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        cli, "show_profile", lambda profile_id: make_profile(profile_id, make_unit("tool"))
    )

    cli.main(["profile", "show", "--id", "dev"])

    out = capsys.readouterr().out
    assert "Profile dev" in out
    assert "tool 1.0.0" in out


def test_apply_passes_plan_and_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_apply(
        plan_file: str, *, profile_id: str | None, cancellation: CancellationToken
    ) -> Status:
        captured["plan_file"] = plan_file
        captured["cancelled"] = cancellation.is_cancelled
        captured["profile_id"] = profile_id
        return Status(message="Provisioning profile dev")

    monkeypatch.setattr(cli, "apply_plan_file", fake_apply)

    cli.main(["apply", "plan.json", "--profile", "dev"])

    assert captured == {"plan_file": "plan.json", "profile_id": "dev", "cancelled": False}


def test_failed_apply_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_apply(
        plan_file: str, *, profile_id: str | None, cancellation: CancellationToken
    ) -> Status:
        _ = (plan_file, profile_id, cancellation)
        status = Status(message="Provisioning profile dev")
        status.add(Status.error("install failed"))
        return status

    monkeypatch.setattr(cli, "apply_plan_file", fake_apply)

    with pytest.raises(SystemExit) as exc:
        cli.main(["apply", "plan.json"])

    assert exc.value.code == 1


def test_unexpected_error_exits_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_show(profile_id: str) -> Profile:
        raise LookupError(profile_id)

    monkeypatch.setattr(cli, "show_profile", fake_show)

    with pytest.raises(SystemExit) as exc:
        cli.main(["profile", "show", "--id", "dev"])

    assert exc.value.code == 1


def test_ctrl_c_during_apply_cancels_the_run(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[bool] = []

    def fake_apply(
        plan_file: str, *, profile_id: str | None, cancellation: CancellationToken
    ) -> Status:
        _ = (plan_file, profile_id)
        cli.sigint_handler(SIGINT, None)
        seen.append(cancellation.is_cancelled)
        status = Status(message="Provisioning profile dev")
        status.add(Status.cancel("Cancelled during phase install"))
        return status

    monkeypatch.setattr(cli, "apply_plan_file", fake_apply)

    with pytest.raises(SystemExit) as exc:
        cli.main(["apply", "plan.json", "--profile", "dev"])

    assert seen == [True]
    assert exc.value.code == 1
    assert cli._active_cancellation is None  # noqa: SLF001


def test_second_ctrl_c_during_apply_aborts(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_apply(
        plan_file: str, *, profile_id: str | None, cancellation: CancellationToken
    ) -> Status:
        _ = (plan_file, profile_id, cancellation)
        cli.sigint_handler(SIGINT, None)
        cli.sigint_handler(SIGINT, None)
        return pytest.fail("second Ctrl+C must abort")

    monkeypatch.setattr(cli, "apply_plan_file", fake_apply)

    with pytest.raises(SystemExit) as exc:
        cli.main(["apply", "plan.json", "--profile", "dev"])

    assert exc.value.code == 1


def test_ctrl_c_outside_apply_exits_cleanly() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.sigint_handler(SIGINT, None)

    assert exc.value.code == 0
