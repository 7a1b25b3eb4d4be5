"""SQLModel implementation of the habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...errors import ConflictError, NotFound
from ...models.habit import Habit, HabitHistory, HabitRecord
from ..database import SessionFactory
from ._storage import conflict_insert, storage_guard


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: str) -> Optional[Habit]:
        with storage_guard("get_habit", habit_id=habit_id):
            with self.session_factory() as session:
                obj = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
                ).first()
                if obj:
                    session.expunge(obj)
                return obj

    def get_active(self, *, user_id: str) -> Optional[Habit]:
        with storage_guard("get_active_habit"):
            with self.session_factory() as session:
                obj = session.exec(
                    select(Habit)
                    .where(Habit.user_id == user_id, Habit.is_active == True)  # noqa: E712
                    .order_by(Habit.created_at.desc())  # type: ignore[attr-defined]
                ).first()
                if obj:
                    session.expunge(obj)
                return obj

    def get_latest_inactive(self, *, user_id: str) -> Optional[Habit]:
        with storage_guard("get_latest_inactive_habit"):
            with self.session_factory() as session:
                obj = session.exec(
                    select(Habit)
                    .where(Habit.user_id == user_id, Habit.is_active == False)  # noqa: E712
                    .order_by(Habit.created_at.desc(), Habit.id.desc())  # type: ignore[attr-defined,union-attr]
                ).first()
                if obj:
                    session.expunge(obj)
                return obj

    def create(self, habit: Habit, *, user_id: str) -> Habit:
        with storage_guard("create_habit"):
            with self.session_factory() as session:
                habit.user_id = user_id
                session.add(habit)
                try:
                    session.commit()
                except IntegrityError as exc:
                    if not habit.is_active:
                        raise
                    # Lost a race with another insert of an active habit
                    session.rollback()
                    raise ConflictError("An active habit already exists") from exc
                session.refresh(habit)
                session.expunge(habit)
                return habit

    # Habit record operations
    def list_records(self, habit_id: int, *, user_id: str) -> list[HabitRecord]:
        """All records of a habit, newest first."""
        with storage_guard("list_records", habit_id=habit_id):
            with self.session_factory() as session:
                statement = (
                    select(HabitRecord)
                    .join(Habit, Habit.id == HabitRecord.habit_id)
                    .where(Habit.user_id == user_id, HabitRecord.habit_id == habit_id)
                    .order_by(HabitRecord.occurred_on.desc())  # type: ignore[attr-defined]
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows

    def upsert_record(
        self, habit_id: int, occurred_on: date, completed: bool, *, user_id: str
    ) -> HabitRecord:
        """Insert or overwrite the record for ``occurred_on`` (last write wins)."""
        now = datetime.now(timezone.utc)
        with storage_guard("upsert_record", habit_id=habit_id, occurred_on=occurred_on):
            with self.session_factory() as session:
                owner = session.exec(
                    select(Habit.id).where(Habit.id == habit_id, Habit.user_id == user_id)
                ).first()
                if owner is None:
                    raise NotFound()

                insert = conflict_insert(session)
                if insert is not None:
                    statement = insert(HabitRecord).values(
                        habit_id=habit_id,
                        occurred_on=occurred_on,
                        completed=completed,
                        created_at=now,
                        updated_at=now,
                    )
                    statement = statement.on_conflict_do_update(
                        index_elements=["habit_id", "occurred_on"],
                        set_={"completed": completed, "updated_at": now},
                    )
                    session.connection().execute(statement)
                else:
                    existing = session.get(HabitRecord, (habit_id, occurred_on))
                    if existing is None:
                        existing = HabitRecord(habit_id=habit_id, occurred_on=occurred_on)
                    existing.completed = completed
                    existing.updated_at = now
                    session.add(existing)
                session.commit()

                record = session.get(HabitRecord, (habit_id, occurred_on), populate_existing=True)
                session.expunge(record)
                return record

    def delete_records(self, habit_id: int, *, user_id: str) -> int:
        with storage_guard("delete_records", habit_id=habit_id):
            with self.session_factory() as session:
                deleted = self._delete_records(session, habit_id, user_id)
                session.commit()
                return deleted

    # History operations
    def list_history(self, *, user_id: str, status: Optional[str] = None) -> list[HabitHistory]:
        with storage_guard("list_history"):
            with self.session_factory() as session:
                statement = select(HabitHistory).where(HabitHistory.user_id == user_id)
                if status is not None:
                    statement = statement.where(HabitHistory.status == status)
                statement = statement.order_by(
                    HabitHistory.end_date.desc(), HabitHistory.id.desc()  # type: ignore[attr-defined,union-attr]
                )
                rows = list(session.exec(statement).all())
                session.expunge_all()
                return rows

    def find_history(
        self, *, user_id: str, title: str, start_date: date, status: str
    ) -> Optional[HabitHistory]:
        with storage_guard("find_history"):
            with self.session_factory() as session:
                obj = session.exec(
                    select(HabitHistory).where(
                        HabitHistory.user_id == user_id,
                        HabitHistory.title == title,
                        HabitHistory.start_date == start_date,
                        HabitHistory.status == status,
                    )
                ).first()
                if obj:
                    session.expunge(obj)
                return obj

    def archive(
        self,
        habit_id: int,
        history: HabitHistory,
        *,
        user_id: str,
        delete_records: bool,
        now: datetime | None = None,
    ) -> HabitHistory:
        """Write ``history``, optionally drop records, and deactivate the habit.

        All three writes share one transaction: on any failure none of them
        is persisted.
        """
        with storage_guard("archive_habit", habit_id=habit_id, status=history.status):
            with self.session_factory() as session:
                habit = session.exec(
                    select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
                ).first()
                if habit is None:
                    raise NotFound()

                history.user_id = user_id
                session.add(history)
                if delete_records:
                    self._delete_records(session, habit_id, user_id)
                habit.is_active = False
                habit.updated_at = now or datetime.now(timezone.utc)
                session.add(habit)
                session.commit()
                session.refresh(history)
                session.expunge(history)
                return history

    @staticmethod
    def _delete_records(session: Session, habit_id: int, user_id: str) -> int:
        rows = session.exec(
            select(HabitRecord)
            .join(Habit, Habit.id == HabitRecord.habit_id)
            .where(Habit.user_id == user_id, HabitRecord.habit_id == habit_id)
        ).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)
