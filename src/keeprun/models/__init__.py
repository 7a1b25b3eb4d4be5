"""SQLModel table exports."""

from .habit import Habit, HabitCategory, HabitHistory, HabitRecord, HabitStatus
from .planner import ActiveDay, ActiveTask, ActiveTimeBlock, RoutineCompletion, Todo
from .user import User

__all__ = [
    "ActiveDay",
    "ActiveTask",
    "ActiveTimeBlock",
    "Habit",
    "HabitCategory",
    "HabitHistory",
    "HabitRecord",
    "HabitStatus",
    "RoutineCompletion",
    "Todo",
    "User",
]
