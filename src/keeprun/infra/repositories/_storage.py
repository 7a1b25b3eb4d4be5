"""Shared helpers for SQLModel repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ...errors import StorageError
from ...logging_config import get_logger

logger = get_logger("storage")

# Dialects whose INSERT supports ON CONFLICT clauses
_CONFLICT_INSERTS: dict[str, Callable[..., Any]] = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@contextmanager
def storage_guard(action: str, **context: Any) -> Iterator[None]:
    """Translate SQLAlchemy failures into ``StorageError``.

    The session scope has already rolled back by the time the error
    reaches this block, so nothing from ``action`` is persisted.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure during %s", action, exc_info=True, extra=context)
        raise StorageError() from exc


def conflict_insert(session: Session) -> Optional[Callable[..., Any]]:
    """Return the dialect ``insert`` supporting ON CONFLICT, if the engine has one."""

    dialect = session.get_bind().dialect.name
    return _CONFLICT_INSERTS.get(dialect)
