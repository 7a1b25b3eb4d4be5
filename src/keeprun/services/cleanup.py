"""Physical deletion of long-archived planner data."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any

from sqlmodel import Session, select

from ..infra.database import SessionFactory
from ..infra.repositories._storage import storage_guard
from ..logging_config import get_logger
from ..models.planner import ActiveDay, ActiveTask, ActiveTimeBlock, RoutineCompletion, Todo

logger = get_logger("services.cleanup")

DEFAULT_RETENTION_DAYS = 90

_RUN_LOCK = Lock()


class CleanupAlreadyRunning(RuntimeError):
    """Raised when a cleanup starts while another one is still in progress."""


@dataclass
class CleanupResult:
    cutoff: datetime
    finished_at: datetime
    deleted: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["cutoff"] = self.cutoff.isoformat()
        payload["finished_at"] = self.finished_at.isoformat()
        return payload


def _delete_rows(session: Session, rows) -> int:
    count = 0
    for row in rows:
        session.delete(row)
        count += 1
    return count


def run_archived_cleanup(
    session_factory: SessionFactory,
    *,
    now: datetime | None = None,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> CleanupResult:
    """Delete archived to-dos, tasks and time blocks untouched for ``retention_days``.

    Routine completion marks older than the cutoff and planned days left
    without blocks go too. Habit tables are never touched. Only one run may
    be in flight at a time; an overlapping call raises ``CleanupAlreadyRunning``
    instead of queueing behind the first.
    """
    if retention_days < 1:
        raise ValueError("retention_days must be positive")
    if not _RUN_LOCK.acquire(blocking=False):
        raise CleanupAlreadyRunning("Archived data cleanup is already running")

    try:
        now = now or datetime.now(timezone.utc)
        # Stored timestamps come back naive from SQLite, compare in naive UTC
        cutoff = now.astimezone(timezone.utc).replace(tzinfo=None) - timedelta(days=retention_days)
        deleted = {
            "todos": 0,
            "active_tasks": 0,
            "active_time_blocks": 0,
            "routine_completions": 0,
            "active_days": 0,
        }

        with storage_guard("archived_cleanup", cutoff=cutoff.isoformat()):
            with session_factory() as session:
                deleted["routine_completions"] = _delete_rows(
                    session,
                    session.exec(
                        select(RoutineCompletion).where(RoutineCompletion.completed_date < cutoff.date())
                    ).all(),
                )
                session.flush()

                deleted["todos"] = _delete_rows(
                    session,
                    session.exec(
                        select(Todo).where(Todo.archived == True, Todo.updated_at < cutoff)  # noqa: E712
                    ).all(),
                )

                deleted["active_tasks"] = _delete_rows(
                    session,
                    session.exec(
                        select(ActiveTask).where(
                            ActiveTask.archived == True, ActiveTask.updated_at < cutoff  # noqa: E712
                        )
                    ).all(),
                )

                blocks = session.exec(
                    select(ActiveTimeBlock).where(
                        ActiveTimeBlock.archived == True,  # noqa: E712
                        ActiveTimeBlock.updated_at < cutoff,
                    )
                ).all()
                block_ids = [block.id for block in blocks]
                if block_ids:
                    # Tasks still attached to a doomed block go with it
                    deleted["active_tasks"] += _delete_rows(
                        session,
                        session.exec(
                            select(ActiveTask).where(ActiveTask.block_id.in_(block_ids))  # type: ignore[union-attr]
                        ).all(),
                    )
                    session.flush()
                    deleted["active_time_blocks"] = _delete_rows(session, blocks)
                session.flush()

                occupied = select(ActiveTimeBlock.day_id)
                deleted["active_days"] = _delete_rows(
                    session,
                    session.exec(
                        select(ActiveDay).where(
                            ActiveDay.day < cutoff.date(),
                            ActiveDay.id.not_in(occupied),  # type: ignore[union-attr]
                        )
                    ).all(),
                )
                session.commit()

        result = CleanupResult(cutoff=cutoff, finished_at=datetime.now(timezone.utc), deleted=deleted)
        logger.info("Archived data cleanup completed", extra={"deleted": deleted, "cutoff": cutoff.isoformat()})
        return result
    finally:
        _RUN_LOCK.release()


def is_cleanup_running() -> bool:
    return _RUN_LOCK.locked()


__all__ = [
    "CleanupAlreadyRunning",
    "CleanupResult",
    "DEFAULT_RETENTION_DAYS",
    "is_cleanup_running",
    "run_archived_cleanup",
]
