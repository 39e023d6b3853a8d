"""Profiles: the installed state a provisioning run changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from provisio.domain.model.units import InstallableUnit

PROP_INSTALL_FOLDER: Final[str] = "provisio.installFolder"
PROP_CACHE: Final[str] = "provisio.cache"
PROP_ENVIRONMENTS: Final[str] = "provisio.environments"


@dataclass(eq=False, kw_only=True)
class Profile:
    """Installed units plus free-form string properties.

    The engine never edits a profile itself; units are added and removed by
    the actions it executes, so a rollback undoes them like any other effect.
    """

    profile_id: str
    properties: dict[str, str] = field(default_factory=dict[str, str])
    timestamp: int = 0
    _units: dict[tuple[str, str], InstallableUnit] = field(
        default_factory=dict[tuple[str, str], "InstallableUnit"]
    )

    def __post_init__(self) -> None:
        if not self.profile_id or not self.profile_id.strip():
            raise ValueError("Profile id must be a non-empty string")

    def get_property(self, key: str, default: str | None = None) -> str | None:
        return self.properties.get(key, default)

    @property
    def install_folder(self) -> str | None:
        return self.properties.get(PROP_INSTALL_FOLDER)

    @property
    def cache_location(self) -> str | None:
        return self.properties.get(PROP_CACHE) or self.install_folder

    def units(self) -> tuple[InstallableUnit, ...]:
        return tuple(self._units[key] for key in sorted(self._units))

    def has_unit(self, unit: InstallableUnit) -> bool:
        return unit.key in self._units

    def find(self, unit_id: str) -> list[InstallableUnit]:
        return [unit for (uid, _version), unit in sorted(self._units.items()) if uid == unit_id]

    def add_unit(self, unit: InstallableUnit) -> bool:
        """Install ``unit``; returns False when it was already present."""

        if unit.key in self._units:
            return False
        self._units[unit.key] = unit
        return True

    def remove_unit(self, unit: InstallableUnit) -> bool:
        """Uninstall ``unit``; returns False when it was not present."""

        return self._units.pop(unit.key, None) is not None
