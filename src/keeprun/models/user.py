"""User profile mirrored from the external identity provider."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

DEFAULT_DAY_START_TIME = "05:00"


class User(SQLModel, table=True):
    """Local profile row keyed by the identity provider's subject id."""

    __tablename__: ClassVar[str] = "user"

    id: str = Field(primary_key=True, max_length=64)
    email: str = Field(nullable=False, unique=True, index=True, max_length=255)
    name: Optional[str] = Field(default=None, max_length=120)
    avatar_url: Optional[str] = Field(default=None, max_length=512)
    day_start_time: str = Field(default=DEFAULT_DAY_START_TIME, nullable=False, max_length=5)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
