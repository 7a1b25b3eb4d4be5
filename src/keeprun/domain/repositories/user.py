"""User repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.user import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: str) -> Optional[User]:
        ...

    def ensure(
        self,
        user_id: str,
        email: str,
        *,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Create the profile if missing and return the stored row."""
        ...

    def update_day_start_time(self, user_id: str, day_start_time: str) -> User:
        ...
