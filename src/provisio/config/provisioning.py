"""Engine defaults for application services."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, require_env_vars

PROFILE_ENV_VAR = "PROVISIO_PROFILE"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    load_touchpoint_plugins: bool = True


def get_engine_config() -> EngineConfig:
    return EngineConfig(
        load_touchpoint_plugins=env_flag("PROVISIO_LOAD_TOUCHPOINTS", default=True),
    )


def require_default_profile() -> str:
    """Return ``PROVISIO_PROFILE`` or raise ``MissingConfigurationError``."""

    return require_env_vars([PROFILE_ENV_VAR])[PROFILE_ENV_VAR].strip()
