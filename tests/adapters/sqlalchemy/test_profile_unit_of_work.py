from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from provisio.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from provisio.domain.model import InstallableUnit, Profile

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    with pytest.raises(StartupError):
        SqlAlchemyProfileUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_startup_uses_database_uri() -> None:
    startup(database_uri="sqlite+pysqlite:///:memory:")

    engine = configured_engine()
    assert engine is not None
    assert engine.url.database == ":memory:"


def test_commit_persists_across_units_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    profile = Profile(profile_id="dev")
    profile.add_unit(InstallableUnit("tool", "1.0.0"))

    with SqlAlchemyProfileUnitOfWork() as uow:
        uow.repositories.profiles.add(profile)
        uow.commit()

    with SqlAlchemyProfileUnitOfWork() as uow:
        loaded = uow.repositories.profiles.get("dev")

    assert loaded is not None
    assert [unit.id for unit in loaded.units()] == ["tool"]


def test_exception_rolls_back(
    sqlite_unit_of_work: Callable[[], SqlAlchemyProfileUnitOfWork],
) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.profiles.add(Profile(profile_id="doomed"))
        raise RuntimeError("abort")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.profiles.get("doomed") is None


def test_repositories_unavailable_outside_context(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyProfileUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
