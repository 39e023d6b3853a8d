from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from provisio.adapters.sqlalchemy.tables import create_all_tables
from provisio.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    shutdown,
    startup,
)
from tests.helpers.engine import EventLog

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("PROVISIO_LOAD_TOUCHPOINTS", "false")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyProfileUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyProfileUnitOfWork:
        return SqlAlchemyProfileUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
