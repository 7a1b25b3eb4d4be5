"""Habit continuity engine.

Drives one habit run per user through ``active -> completed | abandoned``:

* ``create_habit`` opens a run when no active habit exists and the previous
  run either reached its target or was closed with a history snapshot.
* ``record_completion`` upserts today's record for the user's logical date.
* ``current_view`` is the read path and reports ``should_reset`` once two
  consecutive days were missed.
* ``apply_reset`` and ``complete_habit`` write the history snapshot and
  deactivate the habit in a single transaction.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Any, Optional

from ..domain.repositories.habit import HabitRepository
from ..errors import ConflictError, NotEligibleError, NotFound, ValidationError
from ..logging_config import get_logger
from ..models.habit import DEFAULT_TARGET_DAYS, Habit, HabitCategory, HabitHistory, HabitStatus
from . import archiver
from .day_boundary import Clock, DayStart, logical_date, parse_day_start_time, system_clock
from .habits import HabitView, build_view, count_completed_days, current_day, is_target_reached
from .motivation import message_for_day, random_reset_message
from .user_settings import UserSettingsService

logger = get_logger("services.continuity")

MAX_TITLE_LENGTH = 100
MAX_TARGET_DAYS = 365
ACTIVE_HABIT_EXISTS = "An active habit already exists. Reach your target before starting a new one."


@dataclass
class RecordResult:
    view: HabitView
    message: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return {"habit": self.view.to_dict(), "message": self.message}


@dataclass
class CurrentHabit:
    """Read-path answer: the active habit or whether a new one is unlocked."""

    habit: Optional[HabitView]
    can_create_new: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit": self.habit.to_dict() if self.habit else None,
            "canCreateNew": self.can_create_new,
        }


def habit_to_dict(habit: Habit) -> dict[str, Any]:
    return {
        "id": habit.id,
        "title": habit.title,
        "category": habit.category,
        "startDate": habit.start_date.isoformat(),
        "targetDays": habit.target_days,
        "isActive": habit.is_active,
    }


def history_to_dict(row: HabitHistory) -> dict[str, Any]:
    return {
        "id": row.id,
        "title": row.title,
        "category": row.category,
        "startDate": row.start_date.isoformat(),
        "endDate": row.end_date.isoformat(),
        "totalDays": row.total_days,
        "completedDays": row.completed_days,
        "status": row.status,
    }


class HabitContinuityEngine:
    """Applies the habit rules on top of a habit repository."""

    def __init__(
        self,
        habits: HabitRepository,
        settings: UserSettingsService,
        *,
        clock: Clock = system_clock,
        tz: tzinfo | None = None,
        rng: random.Random | None = None,
    ):
        self.habits = habits
        self.settings = settings
        self.clock = clock
        self.tz = tz
        self.rng = rng or random.Random()

    def today(self, user_id: str, day_start_time: DayStart = None) -> date:
        """Logical date of now for ``user_id``."""
        start = day_start_time or self.settings.get_day_start_time(user_id)
        return logical_date(self.clock(), start, self.tz)

    # Commands
    def ensure_can_create(self, user_id: str) -> None:
        """Raise ``ConflictError`` while ``user_id`` still has an active habit."""
        if self.habits.get_active(user_id=user_id) is not None:
            raise ConflictError(ACTIVE_HABIT_EXISTS)

    def create_habit(
        self,
        user_id: str,
        title: str,
        category: str,
        target_days: int | None = DEFAULT_TARGET_DAYS,
    ) -> Habit:
        # An active habit blocks creation whatever the payload looks like
        self.ensure_can_create(user_id)
        title, category, target_days = self._validate_new_habit(title, category, target_days)

        previous = self.habits.get_latest_inactive(user_id=user_id)
        if previous is not None and not self._slot_released(user_id, previous):
            raise ConflictError("Finish your previous habit before starting a new one.")

        habit = Habit(
            title=title,
            category=category,
            start_date=self.today(user_id),
            target_days=target_days,
            is_active=True,
        )
        created = self.habits.create(habit, user_id=user_id)
        logger.info(
            "Habit created",
            extra={"user_id": user_id, "habit_id": created.id, "target_days": target_days},
        )
        return created

    def record_completion(
        self,
        user_id: str,
        habit_id: int,
        completed: bool,
        day_start_time: DayStart = None,
    ) -> RecordResult:
        """Mark today's logical date done or not done for ``habit_id``."""

        if day_start_time:
            day_start_time = parse_day_start_time(day_start_time)
        habit = self._require_habit(user_id, habit_id)
        if not habit.is_active:
            raise ConflictError("This habit has ended and no longer accepts records.")

        today = self.today(user_id, day_start_time)
        self.habits.upsert_record(habit.id, today, bool(completed), user_id=user_id)
        records = self.habits.list_records(habit.id, user_id=user_id)
        view = build_view(habit, records, today)

        day = current_day(habit.start_date, today)
        message = message_for_day(day) if completed else None
        logger.info(
            "Habit record saved",
            extra={
                "user_id": user_id,
                "habit_id": habit.id,
                "occurred_on": today.isoformat(),
                "completed": bool(completed),
                "completed_days": view.completed_days,
            },
        )
        return RecordResult(view=view, message=message)

    def apply_reset(self, user_id: str, habit_id: int) -> HabitHistory:
        """Abandon the run: snapshot it, drop its records and deactivate it."""

        habit = self._require_habit(user_id, habit_id, active=True)
        records = self.habits.list_records(habit.id, user_id=user_id)
        completed = count_completed_days(records, habit.start_date)
        history = archiver.snapshot(
            habit, completed, HabitStatus.ABANDONED, end_date=self.today(user_id)
        )
        stored = self.habits.archive(
            habit.id, history, user_id=user_id, delete_records=True, now=self.clock()
        )
        logger.info(
            "Habit reset",
            extra={"user_id": user_id, "habit_id": habit.id, "completed_days": completed},
        )
        return stored

    def reset_active(self, user_id: str) -> HabitHistory:
        habit = self.habits.get_active(user_id=user_id)
        if habit is None:
            raise NotFound("No active habit found")
        return self.apply_reset(user_id, habit.id)

    def complete_habit(self, user_id: str, habit_id: int) -> HabitHistory:
        """Close a run that reached its target and keep its records."""

        habit = self._require_habit(user_id, habit_id, active=True)
        records = self.habits.list_records(habit.id, user_id=user_id)
        completed = count_completed_days(records, habit.start_date)
        if not is_target_reached(completed, habit.target_days):
            raise NotEligibleError(
                f"Habit not completed yet ({completed}/{habit.target_days} days)"
            )

        history = archiver.snapshot(
            habit, completed, HabitStatus.COMPLETED, end_date=self.today(user_id)
        )
        stored = self.habits.archive(
            habit.id, history, user_id=user_id, delete_records=False, now=self.clock()
        )
        logger.info(
            "Habit completed",
            extra={"user_id": user_id, "habit_id": habit.id, "completed_days": completed},
        )
        return stored

    # Queries
    def current_view(self, user_id: str) -> CurrentHabit:
        habit = self.habits.get_active(user_id=user_id)
        if habit is None:
            return CurrentHabit(habit=None, can_create_new=self.can_create_new(user_id))

        records = self.habits.list_records(habit.id, user_id=user_id)
        view = build_view(habit, records, self.today(user_id))
        if view.should_reset:
            view.reset_message = random_reset_message(self.rng)
        return CurrentHabit(habit=view, can_create_new=False)

    def can_create_new(self, user_id: str) -> bool:
        """True when no habit is active and the latest run reached its target."""

        if self.habits.get_active(user_id=user_id) is not None:
            return False
        previous = self.habits.get_latest_inactive(user_id=user_id)
        if previous is None:
            return False
        records = self.habits.list_records(previous.id, user_id=user_id)
        return is_target_reached(
            count_completed_days(records, previous.start_date), previous.target_days
        )

    def history(self, user_id: str, status: str | None = None) -> list[HabitHistory]:
        if status is not None:
            status = self._coerce(HabitStatus, status, "Unknown history status")
        return self.habits.list_history(user_id=user_id, status=status)

    # Helpers
    def _require_habit(self, user_id: str, habit_id: int, *, active: bool = False) -> Habit:
        habit = self.habits.get_by_id(habit_id, user_id=user_id)
        if habit is None or (active and not habit.is_active):
            raise NotFound()
        return habit

    def _slot_released(self, user_id: str, habit: Habit) -> bool:
        """Whether a previous run no longer blocks a new habit."""

        for status in (HabitStatus.ABANDONED, HabitStatus.COMPLETED):
            closed = self.habits.find_history(
                user_id=user_id,
                title=habit.title,
                start_date=habit.start_date,
                status=status.value,
            )
            if closed is not None:
                return True
        records = self.habits.list_records(habit.id, user_id=user_id)
        return is_target_reached(count_completed_days(records, habit.start_date), habit.target_days)

    def _validate_new_habit(
        self, title: Any, category: Any, target_days: Any
    ) -> tuple[str, str, int]:
        title = (title or "").strip() if isinstance(title, str) else ""
        if not title or not category:
            raise ValidationError("Title and category are required")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
        category = self._coerce(HabitCategory, category, "Unknown habit category")

        if target_days is None:
            target_days = DEFAULT_TARGET_DAYS
        if isinstance(target_days, bool) or not isinstance(target_days, int):
            raise ValidationError("Target days must be a whole number")
        if not 1 <= target_days <= MAX_TARGET_DAYS:
            raise ValidationError(f"Target days must be between 1 and {MAX_TARGET_DAYS}")
        return title, category, target_days

    @staticmethod
    def _coerce(enum_cls, value: Any, message: str) -> str:
        try:
            return enum_cls(value).value
        except ValueError as exc:
            raise ValidationError(message) from exc


__all__ = [
    "CurrentHabit",
    "HabitContinuityEngine",
    "RecordResult",
    "habit_to_dict",
    "history_to_dict",
]
