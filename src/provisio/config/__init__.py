"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, get_log_level
from .provisioning import EngineConfig, get_engine_config, require_default_profile
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "EngineConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_config",
    "get_engine_config",
    "get_log_level",
    "get_storage_config",
    "optional_env",
    "require_default_profile",
    "require_env_vars",
]
