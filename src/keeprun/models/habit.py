"""Continuous habit data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

DEFAULT_TARGET_DAYS = 14


class HabitCategory(str, Enum):
    """Tags a habit can be filed under."""

    EXERCISE = "exercise"
    HEALTH = "health"
    LEARNING = "learning"
    OTHER = "other"


class HabitStatus(str, Enum):
    """Terminal states recorded in habit history."""

    COMPLETED = "completed"
    ABANDONED = "abandoned"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Habit(SQLModel, table=True):
    """The habit a user is tracking toward a run of completed days.

    At most one row per user has ``is_active`` set. The continuity engine
    checks before inserting and a partial unique index backs the check.
    """

    __tablename__: ClassVar[str] = "continuous_habit"
    __table_args__: ClassVar[tuple] = (
        Index(
            "uq_continuous_habit_one_active",
            "user_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True, max_length=64)
    title: str = Field(nullable=False, max_length=100)
    category: str = Field(default=HabitCategory.OTHER.value, nullable=False, max_length=32)
    start_date: date = Field(nullable=False)
    target_days: int = Field(default=DEFAULT_TARGET_DAYS, nullable=False)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)


class HabitRecord(SQLModel, table=True):
    """Completion flag for one habit on one logical date."""

    __tablename__: ClassVar[str] = "habit_record"

    habit_id: int = Field(foreign_key="continuous_habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    completed: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)


class HabitHistory(SQLModel, table=True):
    """Immutable snapshot written when a habit reaches a terminal state."""

    __tablename__: ClassVar[str] = "habit_history"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True, max_length=64)
    title: str = Field(nullable=False, max_length=100)
    category: str = Field(nullable=False, max_length=32)
    start_date: date = Field(nullable=False)
    end_date: date = Field(nullable=False, index=True)
    total_days: int = Field(nullable=False)
    completed_days: int = Field(nullable=False)
    status: str = Field(nullable=False, max_length=16, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
