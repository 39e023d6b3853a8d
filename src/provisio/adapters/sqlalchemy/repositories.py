"""Profile repository backed by a SQLAlchemy session."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, insert, select

from provisio.adapters.sqlalchemy.tables import (
    profile_property_table,
    profile_table,
    profile_unit_table,
)
from provisio.domain.model import (
    ArtifactKey,
    InstallableUnit,
    Profile,
    TouchpointInstruction,
    TouchpointType,
)

if TYPE_CHECKING:
    from sqlalchemy import Row
    from sqlalchemy.orm import Session

log = getLogger(__name__)


class SqlAlchemyProfileRepository:
    """Stores a profile as one row plus its property and unit rows.

    ``add`` replaces whatever is stored for the profile id, so saving a
    profile after a provisioning run writes its complete new state.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Profile) -> None:
        self._delete_rows(entity.profile_id)
        self.session.execute(
            insert(profile_table).values(
                id=entity.profile_id,
                timestamp=entity.timestamp,
                updated_at=datetime.now(UTC),
            )
        )
        if entity.properties:
            self.session.execute(
                insert(profile_property_table),
                [
                    {"profile_id": entity.profile_id, "key": key, "value": value}
                    for key, value in sorted(entity.properties.items())
                ],
            )
        units = entity.units()
        if units:
            self.session.execute(
                insert(profile_unit_table),
                [_unit_row(entity.profile_id, unit) for unit in units],
            )
        log.debug("Stored profile %s with %d unit(s)", entity.profile_id, len(units))

    def get(self, profile_id: str) -> Profile | None:
        row = self.session.execute(
            select(profile_table).where(profile_table.c.id == profile_id)
        ).one_or_none()
        if row is None:
            return None
        properties = {
            prop.key: prop.value
            for prop in self.session.execute(
                select(profile_property_table).where(
                    profile_property_table.c.profile_id == profile_id
                )
            )
        }
        profile = Profile(profile_id=profile_id, properties=properties, timestamp=row.timestamp)
        unit_rows = self.session.execute(
            select(profile_unit_table)
            .where(profile_unit_table.c.profile_id == profile_id)
            .order_by(profile_unit_table.c.unit_id, profile_unit_table.c.version)
        )
        for unit_row in unit_rows:
            profile.add_unit(_unit_from_row(unit_row))
        return profile

    def remove(self, profile_id: str) -> bool:
        existed = self._delete_rows(profile_id)
        if existed:
            log.info("Removed profile %s", profile_id)
        return existed

    def list_ids(self) -> list[str]:
        stmt = select(profile_table.c.id).order_by(profile_table.c.id)
        return list(self.session.execute(stmt).scalars())

    def _delete_rows(self, profile_id: str) -> bool:
        self.session.execute(
            delete(profile_unit_table).where(profile_unit_table.c.profile_id == profile_id)
        )
        self.session.execute(
            delete(profile_property_table).where(
                profile_property_table.c.profile_id == profile_id
            )
        )
        result = self.session.execute(delete(profile_table).where(profile_table.c.id == profile_id))
        return bool(result.rowcount)


def _unit_row(profile_id: str, unit: InstallableUnit) -> dict[str, Any]:
    return {
        "profile_id": profile_id,
        "unit_id": unit.id,
        "version": unit.version,
        "touchpoint_id": unit.touchpoint_type.id,
        "touchpoint_version": unit.touchpoint_type.version,
        "touchpoint_data": {
            key: {"body": instruction.body, "import": instruction.import_attribute}
            for key, instruction in unit.touchpoint_data.items()
        },
        "artifacts": [
            {"classifier": artifact.classifier, "id": artifact.id, "version": artifact.version}
            for artifact in unit.artifacts
        ],
        "properties": dict(unit.properties),
    }


def _unit_from_row(row: Row[Any]) -> InstallableUnit:
    touchpoint_data = cast("dict[str, dict[str, str | None]]", row.touchpoint_data or {})
    artifacts = cast("list[dict[str, str]]", row.artifacts or [])
    return InstallableUnit(
        id=row.unit_id,
        version=row.version,
        touchpoint_type=TouchpointType(row.touchpoint_id, row.touchpoint_version),
        touchpoint_data={
            key: TouchpointInstruction(body=value["body"] or "", import_attribute=value.get("import"))
            for key, value in touchpoint_data.items()
        },
        artifacts=tuple(
            ArtifactKey(item["classifier"], item["id"], item["version"]) for item in artifacts
        ),
        properties=cast("dict[str, str]", row.properties or {}),
    )
