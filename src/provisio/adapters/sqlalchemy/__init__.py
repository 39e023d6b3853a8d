"""SQLAlchemy adapter package for the profile store."""

from __future__ import annotations

from .repositories import SqlAlchemyProfileRepository
from .tables import create_all_tables, metadata
from .unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyProfileRepository",
    "SqlAlchemyProfileUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
]
