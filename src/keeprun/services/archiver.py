"""Habit history snapshots."""

from __future__ import annotations

from datetime import date

from ..models.habit import Habit, HabitHistory, HabitStatus


def snapshot(habit: Habit, completed_days: int, status: HabitStatus, end_date: date) -> HabitHistory:
    """Build the immutable history row for a habit entering a terminal state.

    Nothing is persisted here; the continuity engine writes the row inside
    the same transaction that deactivates the habit.
    """

    return HabitHistory(
        user_id=habit.user_id,
        title=habit.title,
        category=habit.category,
        start_date=habit.start_date,
        end_date=end_date,
        total_days=habit.target_days,
        completed_days=completed_days,
        status=HabitStatus(status).value,
    )


__all__ = ["snapshot"]
