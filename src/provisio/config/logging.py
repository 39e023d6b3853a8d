"""Logging setup for the command line entry points."""

from __future__ import annotations

import logging

from .env import optional_env
from .errors import ConfigurationError


def get_log_level(default: int = logging.INFO) -> int:
    """Resolve ``PROVISIO_LOG_LEVEL`` (a level name or number) to a logging level."""

    value = optional_env("PROVISIO_LOG_LEVEL")
    if value is None:
        return default
    if value.isdigit():
        return int(value)
    level = logging.getLevelNamesMapping().get(value.upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level in PROVISIO_LOG_LEVEL: {value!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Without an explicit ``level`` the level comes from ``PROVISIO_LOG_LEVEL``
    and falls back to INFO. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level if level is not None else get_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
