"""SQLAlchemy table metadata for the profile store."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class JSONText(TypeDecorator[Any]):
    """JSON document stored as text with stable key order."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Any:
        _ = dialect
        if value is None:
            return None
        return cast(Any, json.loads(value))


profile_table = Table(
    "profile",
    metadata,
    Column("id", String(255), primary_key=True),
    Column("timestamp", BigInteger, nullable=False, default=0),
    Column("updated_at", UTCDateTime(), nullable=False),
)

profile_property_table = Table(
    "profile_property",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "profile_id",
        String(255),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("key", String(255), nullable=False),
    Column("value", Text, nullable=False),
    UniqueConstraint("profile_id", "key"),
)

profile_unit_table = Table(
    "profile_unit",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "profile_id",
        String(255),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("unit_id", String(255), nullable=False),
    Column("version", String(64), nullable=False),
    Column("touchpoint_id", String(255), nullable=False),
    Column("touchpoint_version", String(64), nullable=False),
    Column("touchpoint_data", JSONText(), nullable=False),
    Column("artifacts", JSONText(), nullable=False),
    Column("properties", JSONText(), nullable=False),
    UniqueConstraint("profile_id", "unit_id", "version"),
)


def create_all_tables(engine: Engine) -> None:
    """Create the profile store tables that do not exist yet."""

    log.info("Creating profile store tables")
    metadata.create_all(engine, checkfirst=True)
