"""Habit repository protocol."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from ...models.habit import Habit, HabitHistory, HabitRecord


class HabitRepository(Protocol):
    """Persistence for habits, their daily records and history snapshots."""

    def get_by_id(self, habit_id: int, *, user_id: str) -> Optional[Habit]:
        """Retrieve a habit owned by ``user_id``."""
        ...

    def get_active(self, *, user_id: str) -> Optional[Habit]:
        """Return the user's active habit, if any."""
        ...

    def get_latest_inactive(self, *, user_id: str) -> Optional[Habit]:
        """Return the most recently created inactive habit."""
        ...

    def create(self, habit: Habit, *, user_id: str) -> Habit:
        ...

    def list_records(self, habit_id: int, *, user_id: str) -> list[HabitRecord]:
        """All records of a habit, newest first."""
        ...

    def upsert_record(
        self, habit_id: int, occurred_on: date, completed: bool, *, user_id: str
    ) -> HabitRecord:
        """Insert or overwrite the record for ``occurred_on``."""
        ...

    def delete_records(self, habit_id: int, *, user_id: str) -> int:
        """Remove every record of a habit, returning the number deleted."""
        ...

    def list_history(self, *, user_id: str, status: Optional[str] = None) -> list[HabitHistory]:
        ...

    def find_history(
        self, *, user_id: str, title: str, start_date: date, status: str
    ) -> Optional[HabitHistory]:
        ...

    def archive(
        self,
        habit_id: int,
        history: HabitHistory,
        *,
        user_id: str,
        delete_records: bool,
        now: datetime | None = None,
    ) -> HabitHistory:
        """Write ``history`` and deactivate the habit in one transaction."""
        ...
