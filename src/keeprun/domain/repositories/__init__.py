"""Repository protocols implemented by ``keeprun.infra.repositories``."""

from .habit import HabitRepository
from .user import UserRepository

__all__ = ["HabitRepository", "UserRepository"]
