"""Continuity rules for a habit run: counting, day index and reset checks.

All functions here are pure. They take already-loaded habit and record
rows plus the caller's logical "today" and never touch storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ..models.habit import Habit, HabitRecord
from .day_boundary import as_date, days_between

# First 1-based day index on which the two-missed-days rule can fire
RESET_GRACE_DAYS = 3


@dataclass(frozen=True)
class ResetDecision:
    should_reset: bool
    days_since_start: int
    missed_days: tuple[date, ...] = ()


@dataclass
class HabitView:
    """Read model returned to clients for the active habit."""

    id: int
    title: str
    category: str
    start_date: date
    target_days: int
    completed_days: int
    current_day: int
    current_streak: int
    today_completed: bool
    should_reset: bool
    is_completed: bool
    records: list[dict[str, Any]] = field(default_factory=list)
    reset_message: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "startDate": self.start_date.isoformat(),
            "targetDays": self.target_days,
            "completedDays": self.completed_days,
            "currentDay": self.current_day,
            "currentStreak": self.current_streak,
            "todayCompleted": self.today_completed,
            "shouldReset": self.should_reset,
            "isCompleted": self.is_completed,
            "canComplete": self.is_completed,
            "records": self.records,
            "resetMessage": self.reset_message,
        }


def completed_dates(records: Iterable[HabitRecord], start_date: date) -> set[date]:
    """Distinct logical dates on or after ``start_date`` marked completed."""

    start = as_date(start_date)
    return {
        as_date(record.occurred_on)
        for record in records
        if record.completed and as_date(record.occurred_on) >= start
    }


def count_completed_days(records: Iterable[HabitRecord], start_date: date) -> int:
    return len(completed_dates(records, start_date))


def current_day(start_date: date, today: date) -> int:
    """1-based index of ``today`` within the run, never below 1."""

    return max(days_between(start_date, today) + 1, 1)


def current_streak(records: Iterable[HabitRecord], start_date: date, today: date) -> int:
    """Consecutive completed days ending today, or yesterday if today is still open."""

    done = completed_dates(records, start_date)
    cursor = as_date(today)
    if cursor not in done:
        cursor -= timedelta(days=1)
    streak = 0
    while cursor in done:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def is_target_reached(completed_days: int, target_days: int) -> bool:
    return completed_days >= target_days


def evaluate_reset(habit: Habit, records: Iterable[HabitRecord], today: date) -> ResetDecision:
    """Decide whether the run has lapsed.

    From day 3 of the run onwards, the run lapses once neither yesterday nor
    the day before holds a completed record. A missing record counts as not
    completed.
    """

    today = as_date(today)
    elapsed = days_between(habit.start_date, today)
    if current_day(habit.start_date, today) < RESET_GRACE_DAYS:
        return ResetDecision(should_reset=False, days_since_start=elapsed)

    by_day = {as_date(record.occurred_on): record.completed for record in records}
    window = (today - timedelta(days=1), today - timedelta(days=2))
    missed = tuple(day for day in window if not by_day.get(day, False))
    return ResetDecision(
        should_reset=len(missed) == len(window),
        days_since_start=elapsed,
        missed_days=missed,
    )


def build_view(habit: Habit, records: Iterable[HabitRecord], today: date) -> HabitView:
    """Assemble the client view of ``habit`` as of logical date ``today``."""

    rows = sorted(records, key=lambda record: record.occurred_on, reverse=True)
    today = as_date(today)
    completed = count_completed_days(rows, habit.start_date)
    today_record = next((r for r in rows if as_date(r.occurred_on) == today), None)
    decision = evaluate_reset(habit, rows, today)

    return HabitView(
        id=habit.id,
        title=habit.title,
        category=habit.category,
        start_date=as_date(habit.start_date),
        target_days=habit.target_days,
        completed_days=completed,
        # Display index stops at the target once the run overstays it
        current_day=min(current_day(habit.start_date, today), habit.target_days),
        current_streak=current_streak(rows, habit.start_date, today),
        today_completed=bool(today_record and today_record.completed),
        should_reset=decision.should_reset,
        is_completed=is_target_reached(completed, habit.target_days),
        records=[
            {"date": as_date(r.occurred_on).isoformat(), "completed": r.completed} for r in rows
        ],
    )


__all__ = [
    "HabitView",
    "RESET_GRACE_DAYS",
    "ResetDecision",
    "build_view",
    "completed_dates",
    "count_completed_days",
    "current_day",
    "current_streak",
    "evaluate_reset",
    "is_target_reached",
]
