"""Application context for dependency injection."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine

from .auth import IdentityVerifier
from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository, SQLModelUserRepository
from .services.continuity import HabitContinuityEngine
from .services.day_boundary import Clock, resolve_timezone, system_clock
from .services.user_settings import SettingsCache, UserSettingsService


@dataclass
class AppContext:
    """Everything a request handler or background job needs, built once per app."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory

    habit_repo: SQLModelHabitRepository
    user_repo: SQLModelUserRepository

    settings_cache: SettingsCache
    settings: UserSettingsService
    habits: HabitContinuityEngine
    verifier: IdentityVerifier


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Clock = system_clock,
    rng: random.Random | None = None,
) -> AppContext:
    """Create the engine, ensure the schema and wire repositories and services."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    habit_repo = SQLModelHabitRepository(session_factory)
    user_repo = SQLModelUserRepository(session_factory)

    settings_cache = SettingsCache()
    settings = UserSettingsService(
        user_repo, settings_cache, default_day_start_time=config.DEFAULT_DAY_START_TIME
    )
    habits = HabitContinuityEngine(
        habit_repo,
        settings,
        clock=clock,
        tz=resolve_timezone(config.TIMEZONE),
        rng=rng,
    )
    verifier = IdentityVerifier(config.AUTH_JWT_SECRET or "", audience=config.AUTH_AUDIENCE)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        habit_repo=habit_repo,
        user_repo=user_repo,
        settings_cache=settings_cache,
        settings=settings,
        habits=habits,
        verifier=verifier,
    )
