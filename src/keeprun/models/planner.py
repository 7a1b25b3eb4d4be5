"""Soft-deletable planner tables swept by the archived-data cleanup job.

Only the columns the cleanup needs live here; planning and to-do
endpoints are served elsewhere.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Todo(SQLModel, table=True):
    """Spot or routine to-do item."""

    __tablename__: ClassVar[str] = "todo"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True, max_length=64)
    title: str = Field(nullable=False, max_length=200)
    is_routine: bool = Field(default=False, nullable=False)
    archived: bool = Field(default=False, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)


class RoutineCompletion(SQLModel, table=True):
    """Per-day completion mark of a routine to-do."""

    __tablename__: ClassVar[str] = "todo_routine_completion"

    id: Optional[int] = Field(default=None, primary_key=True)
    todo_id: int = Field(foreign_key="todo.id", nullable=False, index=True)
    completed_date: date = Field(nullable=False, index=True)


class ActiveDay(SQLModel, table=True):
    """A planned day that owns time blocks."""

    __tablename__: ClassVar[str] = "active_day"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", nullable=False, index=True, max_length=64)
    day: date = Field(nullable=False, index=True)


class ActiveTimeBlock(SQLModel, table=True):
    """Time block within a planned day."""

    __tablename__: ClassVar[str] = "active_time_block"

    id: Optional[int] = Field(default=None, primary_key=True)
    day_id: int = Field(foreign_key="active_day.id", nullable=False, index=True)
    label: str = Field(default="", max_length=120)
    archived: bool = Field(default=False, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)


class ActiveTask(SQLModel, table=True):
    """Task scheduled inside a time block."""

    __tablename__: ClassVar[str] = "active_task"

    id: Optional[int] = Field(default=None, primary_key=True)
    block_id: Optional[int] = Field(default=None, foreign_key="active_time_block.id", index=True)
    title: str = Field(default="", max_length=200)
    archived: bool = Field(default=False, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)
