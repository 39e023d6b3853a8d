"""Ports for persisting profiles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from provisio.domain.model import Profile


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ProfileRepository(Repository["Profile"], Protocol):
    """Persistence contract for profiles and their installed units.

    ``add`` inserts a new profile or overwrites the stored state of an
    existing one with the same id.
    """

    def get(self, profile_id: str) -> Profile | None: ...

    def remove(self, profile_id: str) -> bool: ...

    def list_ids(self) -> list[str]: ...
