"""Domain port definitions for adapters."""

from __future__ import annotations

from .artifacts import ArtifactCollector, ArtifactRequest
from .persistence import ProfileRepository, Repository
from .planning import Planner
from .unit_of_work import (
    ProfileRepositories,
    ProfileUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ArtifactCollector",
    "ArtifactRequest",
    "Planner",
    "ProfileRepositories",
    "ProfileRepository",
    "ProfileUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
