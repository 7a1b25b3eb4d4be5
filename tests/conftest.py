"""Pytest configuration and shared fixtures for Keep Run tests.

Every test gets its own SQLite file under ``tmp_path`` and a frozen clock,
so logical dates are deterministic and nothing touches a real database.
"""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from keeprun import create_app
from keeprun.config import TestConfig
from keeprun.infra.database import create_db_engine, create_session_factory, init_database
from keeprun.infra.repositories import SQLModelHabitRepository, SQLModelUserRepository
from keeprun.models import Habit, HabitRecord
from keeprun.services.continuity import HabitContinuityEngine
from keeprun.services.day_boundary import resolve_timezone
from keeprun.services.user_settings import SettingsCache, UserSettingsService

TOKYO = ZoneInfo("Asia/Tokyo")
USER_ID = "user-1"
USER_EMAIL = "runner@example.com"
OTHER_USER_ID = "user-2"
OTHER_EMAIL = "other@example.com"


class FrozenClock:
    """Callable clock that only moves when a test tells it to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

    def set(self, now: datetime) -> None:
        self.now = now


# =============================================================================
# Configuration and database fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch):
    """TestConfig pointed at a throwaway data directory."""

    monkeypatch.setenv("KEEPRUN_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("KEEPRUN_DATABASE_URL", f"sqlite:///{tmp_path / 'keeprun-test.db'}")
    monkeypatch.setenv("KEEPRUN_TIMEZONE", "Asia/Tokyo")
    for name in (
        "KEEPRUN_DEFAULT_DAY_START_TIME",
        "KEEPRUN_CRON_SECRET",
        "KEEPRUN_AUTH_JWT_SECRET",
        "KEEPRUN_CLEANUP_RETENTION_DAYS",
        "KEEPRUN_DEV_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    return TestConfig()


@pytest.fixture
def clock():
    """Noon in Tokyo on 2024-03-10, well past the default 05:00 day start."""

    return FrozenClock(datetime(2024, 3, 10, 12, 0, tzinfo=TOKYO))


@pytest.fixture
def db_engine(config):
    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory):
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def user_repo(session_factory):
    return SQLModelUserRepository(session_factory)


@pytest.fixture
def user_id(user_repo):
    """A registered user with the default day start."""

    user_repo.ensure(USER_ID, USER_EMAIL, name="Runner")
    return USER_ID


@pytest.fixture
def other_user_id(user_repo):
    user_repo.ensure(OTHER_USER_ID, OTHER_EMAIL)
    return OTHER_USER_ID


@pytest.fixture
def settings_service(user_repo):
    return UserSettingsService(user_repo, SettingsCache())


@pytest.fixture
def continuity(habit_repo, settings_service, clock):
    return HabitContinuityEngine(
        habit_repo,
        settings_service,
        clock=clock,
        tz=resolve_timezone("Asia/Tokyo"),
        rng=random.Random(7),
    )


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def habit_factory(habit_repo, user_id):
    """Insert a habit row directly, bypassing the creation rules."""

    def _create(**overrides) -> Habit:
        owner = overrides.pop("user_id", user_id)
        values = {
            "title": "Morning run",
            "category": "exercise",
            "start_date": date(2024, 3, 10),
            "target_days": 14,
            "is_active": True,
        }
        values.update(overrides)
        return habit_repo.create(Habit(**values), user_id=owner)

    return _create


@pytest.fixture
def mark_days(habit_repo, user_id):
    """Store completed records for ``count`` consecutive days from ``first``."""

    def _mark(habit: Habit, first: date, count: int, *, completed: bool = True) -> list[HabitRecord]:
        return [
            habit_repo.upsert_record(
                habit.id, first + timedelta(days=offset), completed, user_id=user_id
            )
            for offset in range(count)
        ]

    return _mark


# =============================================================================
# Flask fixtures
# =============================================================================


@pytest.fixture
def app(config, clock):
    return create_app(config=config, clock=clock, rng=random.Random(7))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_context(app):
    return app.extensions["keeprun"]


@pytest.fixture
def auth_headers(app_context):
    token = app_context.verifier.issue(USER_ID, USER_EMAIL, name="Runner")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(app_context):
    token = app_context.verifier.issue(OTHER_USER_ID, OTHER_EMAIL)
    return {"Authorization": f"Bearer {token}"}
