"""Application orchestration entry points."""

from __future__ import annotations

import time
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from provisio.adapters.plan_file import build_change_request, load_plan_file
from provisio.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyProfileUnitOfWork,
    is_started,
    startup,
)
from provisio.config import get_engine_config, require_default_profile
from provisio.domain.director import Director
from provisio.domain.engine import Engine, TouchpointRegistry
from provisio.domain.model import Profile
from provisio.domain.planning import DiffPlanner
from provisio.domain.ports.unit_of_work import ProfileUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from provisio.config import EngineConfig
    from provisio.domain.engine import CancellationToken, ProgressCallback, ProvisioningContext
    from provisio.domain.model import Status

UnitOfWorkFactory = Callable[[], ProfileUnitOfWork]


log = getLogger(__name__)


class ProfileNotFoundError(LookupError):
    """Raised when a command names a profile that is not stored."""


class ProfileExistsError(ValueError):
    """Raised when creating a profile whose id is already taken."""


def _ensure_store(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyProfileUnitOfWork


def default_touchpoints(config: EngineConfig | None = None) -> TouchpointRegistry:
    """Registry holding the null touchpoint plus any installed plugin touchpoints."""

    effective = config or get_engine_config()
    registry = TouchpointRegistry()
    if effective.load_touchpoint_plugins:
        loaded = registry.load_entry_points()
        log.debug("Loaded %d touchpoint plugin(s)", loaded)
    return registry


def build_director(
    *,
    touchpoints: TouchpointRegistry | None = None,
    on_progress: ProgressCallback | None = None,
) -> Director:
    engine = Engine(touchpoints or default_touchpoints(), on_progress=on_progress)
    return Director(engine, DiffPlanner())


def create_profile(
    profile_id: str,
    properties: Mapping[str, str] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Profile:
    effective_uow = _ensure_store(unit_of_work_factory)
    profile = Profile(profile_id=profile_id, properties=dict(properties or {}))
    with effective_uow() as uow:
        repository = uow.repositories.profiles
        if repository.get(profile_id) is not None:
            raise ProfileExistsError(f"Profile {profile_id!r} already exists")
        repository.add(profile)
        uow.commit()
    log.info("Created profile %s", profile_id)
    return profile


def show_profile(
    profile_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Profile:
    effective_uow = _ensure_store(unit_of_work_factory)
    with effective_uow() as uow:
        profile = uow.repositories.profiles.get(profile_id)
    if profile is None:
        raise ProfileNotFoundError(f"Profile {profile_id!r} not found")
    return profile


def apply_plan_file(
    path: str | Path,
    *,
    profile_id: str | None = None,
    director: Director | None = None,
    context: ProvisioningContext | None = None,
    cancellation: CancellationToken | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Status:
    """Provision the profile named by the plan file and store the outcome.

    The profile id comes from ``profile_id``, then the plan file, then
    ``PROVISIO_PROFILE``. The stored profile is only updated when the run
    neither failed nor was cancelled.
    """

    payload = load_plan_file(path)
    target = profile_id or payload.profile
    if target is None:
        log.debug("No profile given for %s; falling back to PROVISIO_PROFILE", path)
        target = require_default_profile()

    effective_uow = _ensure_store(unit_of_work_factory)
    effective_director = director or build_director()
    with effective_uow() as uow:
        repository = uow.repositories.profiles
        profile = repository.get(target)
        if profile is None:
            raise ProfileNotFoundError(f"Profile {target!r} not found")

        request = build_change_request(payload, profile)
        log.info(
            "Applying %s to profile %s: %d addition(s), %d removal(s)",
            path,
            target,
            len(request.additions),
            len(request.removals),
        )
        status = effective_director.provision(request, context, cancellation)
        if status.is_failure:
            log.warning("Provisioning of %s did not complete: %s", target, status)
            uow.rollback()
            return status

        profile.timestamp = int(time.time() * 1000)
        repository.add(profile)
        uow.commit()

    log.info("Profile %s now holds %d unit(s)", target, len(profile.units()))
    return status
