"""SQLModel repository implementations."""

from .habit import SQLModelHabitRepository
from .user import SQLModelUserRepository

__all__ = ["SQLModelHabitRepository", "SQLModelUserRepository"]
