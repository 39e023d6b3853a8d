# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from provisio.app import apply_plan_file, create_profile, show_profile
from provisio.config import configure_logging
from provisio.domain.engine import CancellationToken

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from provisio.domain.model import Profile, Status

log = logging.getLogger(__name__)

# token of the provisioning run in progress, cancelled by the first Ctrl+C
_active_cancellation: CancellationToken | None = None


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision installable units into profiles")
    subparsers = parser.add_subparsers(dest="command", required=True)

    profile = subparsers.add_parser("profile", help="Profile management commands")
    profile_sub = profile.add_subparsers(dest="profile_command", required=True)
    profile_create = profile_sub.add_parser("create", help="Create an empty profile")
    profile_create.add_argument("--id", dest="profile_id", type=str, required=True)
    profile_create.add_argument(
        "--property",
        dest="properties",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Profile property, may be repeated",
    )
    profile_show = profile_sub.add_parser("show", help="Show a profile and its units")
    profile_show.add_argument("--id", dest="profile_id", type=str, required=True)

    apply = subparsers.add_parser("apply", help="Apply a JSON plan file to a profile")
    apply.add_argument("plan_file", type=str, help="Path to the plan file")
    apply.add_argument(
        "--profile",
        dest="profile_id",
        type=str,
        help="Profile to provision (overrides the plan file and PROVISIO_PROFILE)",
    )

    return parser.parse_args(list(argv))


def _parse_properties(items: Sequence[str]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid property {item!r}, expected KEY=VALUE")
        properties[key] = value
    return properties


def _format_profile(profile: Profile) -> str:
    lines = [f"Profile {profile.profile_id} (timestamp {profile.timestamp})"]
    lines.extend(f"  {key} = {value}" for key, value in sorted(profile.properties.items()))
    units = profile.units()
    lines.append(f"  {len(units)} unit(s)")
    lines.extend(f"    {unit.id} {unit.version} [{unit.touchpoint_type}]" for unit in units)
    return "\n".join(lines)


def _log_status(status: Status) -> None:
    level = logging.ERROR if status.is_failure else logging.INFO
    log.log(level, "%s", status)
    for node in status.walk():
        if node is status or not node.message:
            continue
        log.log(level if node.is_failure else logging.INFO, "  %s", node)


def _apply(plan_file: str, profile_id: str | None) -> Status:
    global _active_cancellation  # noqa: PLW0603
    token = CancellationToken()
    _active_cancellation = token
    try:
        return apply_plan_file(plan_file, profile_id=profile_id, cancellation=token)
    finally:
        _active_cancellation = None


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    properties: dict[str, str] = {}
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "profile" and parsed_args.profile_command == "create":
            properties = _parse_properties(parsed_args.properties)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "profile" and parsed_args.profile_command == "create":
            profile = create_profile(parsed_args.profile_id, properties)
            log.info("Created profile %s", profile.profile_id)
        elif parsed_args.command == "profile" and parsed_args.profile_command == "show":
            print(_format_profile(show_profile(parsed_args.profile_id)))
        elif parsed_args.command == "apply":
            status = _apply(parsed_args.plan_file, parsed_args.profile_id)
            _log_status(status)
            if status.is_failure:
                sys.exit(1)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during provisioning")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully.

    During ``apply`` the first Ctrl+C cancels the run, which then rolls back
    after its current step; a second one aborts with exit code 1.
    """
    token = _active_cancellation
    if token is None:
        log.info("Closed by user (Ctrl+C)")
        sys.exit(0)
    if not token.is_cancelled:
        log.warning("Cancelling provisioning (Ctrl+C); press again to abort")
        token.cancel()
        return
    log.error("Provisioning aborted by user (Ctrl+C)")
    sys.exit(1)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
