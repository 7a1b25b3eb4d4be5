"""Per-user settings with an explicit read-through cache."""

from __future__ import annotations

from threading import Lock
from typing import Optional

from ..domain.repositories.user import UserRepository
from ..logging_config import get_logger
from .day_boundary import DEFAULT_DAY_START_TIME, format_day_start_time

logger = get_logger("services.user_settings")


class SettingsCache:
    """Day-start times keyed by user id.

    Entries are dropped whenever a write for that user succeeds. Each drop
    bumps the user's version, and a ``put`` carrying an older version is
    discarded so a read that raced a write cannot cache the old value. One
    cache belongs to one application instance; nothing here is process-global.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._versions: dict[str, int] = {}
        self._lock = Lock()

    def get(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._entries.get(user_id)

    def version(self, user_id: str) -> int:
        with self._lock:
            return self._versions.get(user_id, 0)

    def put(self, user_id: str, day_start_time: str, *, version: Optional[int] = None) -> bool:
        """Store ``day_start_time`` unless ``version`` is no longer current."""
        with self._lock:
            if version is not None and version != self._versions.get(user_id, 0):
                return False
            self._entries[user_id] = day_start_time
            return True

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)
            self._versions[user_id] = self._versions.get(user_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class UserSettingsService:
    """Reads and writes the user's day start time."""

    def __init__(
        self,
        users: UserRepository,
        cache: SettingsCache | None = None,
        *,
        default_day_start_time: str = DEFAULT_DAY_START_TIME,
    ):
        self.users = users
        self.cache = cache if cache is not None else SettingsCache()
        self.default_day_start_time = format_day_start_time(default_day_start_time)

    def get_day_start_time(self, user_id: str) -> str:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        version = self.cache.version(user_id)
        user = self.users.get_by_id(user_id)
        value = user.day_start_time if user and user.day_start_time else self.default_day_start_time
        self.cache.put(user_id, value, version=version)
        return value

    def update_day_start_time(self, user_id: str, day_start_time: str) -> str:
        """Validate and store a new day start time.

        Raises:
            ValidationError: the value is not ``HH:MM``
            NotFound: the user has no profile row
        """
        normalized = format_day_start_time(day_start_time)
        user = self.users.update_day_start_time(user_id, normalized)
        self.cache.invalidate(user_id)
        logger.info("Day start time updated", extra={"user_id": user_id, "day_start_time": normalized})
        return user.day_start_time


__all__ = ["SettingsCache", "UserSettingsService"]
