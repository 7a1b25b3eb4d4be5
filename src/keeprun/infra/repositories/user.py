"""SQLModel implementation of the user repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ...errors import ConflictError, NotFound
from ...models.user import User
from ..database import SessionFactory
from ._storage import conflict_insert, storage_guard


class SQLModelUserRepository:
    """Profiles keyed by the identity provider's subject id."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with storage_guard("get_user"):
            with self.session_factory() as session:
                user = session.get(User, user_id)
                if user:
                    session.expunge(user)
                return user

    def ensure(
        self,
        user_id: str,
        email: str,
        *,
        name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Create the profile on first sight; otherwise return the stored row.

        The insert carries ``ON CONFLICT DO NOTHING`` so two first requests
        racing each other both end up reading the same row.
        """
        with storage_guard("ensure_user"):
            with self.session_factory() as session:
                insert = conflict_insert(session)
                if insert is not None:
                    now = datetime.now(timezone.utc)
                    statement = (
                        insert(User)
                        .values(
                            id=user_id,
                            email=email,
                            name=name,
                            avatar_url=avatar_url,
                            created_at=now,
                            updated_at=now,
                        )
                        .on_conflict_do_nothing()
                    )
                    session.connection().execute(statement)
                elif session.get(User, user_id) is None:
                    session.add(User(id=user_id, email=email, name=name, avatar_url=avatar_url))
                session.flush()

                user = session.get(User, user_id)
                if user is None:
                    # The email already belongs to a different subject id
                    raise ConflictError("This email is linked to another account")
                session.commit()
                session.expunge(user)
                return user

    def update_day_start_time(self, user_id: str, day_start_time: str) -> User:
        with storage_guard("update_day_start_time"):
            with self.session_factory() as session:
                user = session.get(User, user_id)
                if user is None:
                    raise NotFound("User not found")
                user.day_start_time = day_start_time
                user.updated_at = datetime.now(timezone.utc)
                session.add(user)
                session.commit()
                session.refresh(user)
                session.expunge(user)
                return user
