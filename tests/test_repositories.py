"""Unit tests for the SQLModel repositories."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlmodel import select

from keeprun.errors import ConflictError, NotFound
from keeprun.models import HabitHistory, HabitRecord, User


class TestHabitRepository:
    def test_create_and_get_scoped_by_user(self, habit_repo, habit_factory, user_id, other_user_id):
        habit = habit_factory()

        assert habit_repo.get_by_id(habit.id, user_id=user_id).title == "Morning run"
        assert habit_repo.get_by_id(habit.id, user_id=other_user_id) is None

    def test_get_active_and_latest_inactive(self, habit_repo, habit_factory, user_id):
        habit_factory(title="Old", is_active=False)
        newer = habit_factory(title="Older but newer row", is_active=False)
        active = habit_factory(title="Now")

        assert habit_repo.get_active(user_id=user_id).id == active.id
        assert habit_repo.get_latest_inactive(user_id=user_id).id == newer.id

    def test_second_active_habit_is_rejected(self, habit_repo, habit_factory, user_id, other_user_id):
        first = habit_factory()

        with pytest.raises(ConflictError):
            habit_factory(title="Duplicate")

        assert habit_repo.get_active(user_id=user_id).id == first.id
        # Inactive rows and other users are outside the one-active rule
        habit_factory(title="Archived", is_active=False)
        habit_factory(user_id=other_user_id)

    def test_upsert_record_last_write_wins(self, habit_repo, habit_factory, user_id):
        habit = habit_factory()
        day = date(2024, 3, 10)

        first = habit_repo.upsert_record(habit.id, day, True, user_id=user_id)
        second = habit_repo.upsert_record(habit.id, day, False, user_id=user_id)

        assert first.completed is True
        assert second.completed is False
        records = habit_repo.list_records(habit.id, user_id=user_id)
        assert len(records) == 1
        assert records[0].completed is False

    def test_upsert_record_requires_ownership(self, habit_repo, habit_factory, other_user_id):
        habit = habit_factory()
        with pytest.raises(NotFound):
            habit_repo.upsert_record(habit.id, date(2024, 3, 10), True, user_id=other_user_id)

    def test_list_records_newest_first(self, habit_repo, habit_factory, mark_days, user_id):
        habit = habit_factory()
        mark_days(habit, date(2024, 3, 10), 3)

        records = habit_repo.list_records(habit.id, user_id=user_id)
        assert [r.occurred_on for r in records] == [
            date(2024, 3, 12),
            date(2024, 3, 11),
            date(2024, 3, 10),
        ]

    def test_list_records_hidden_from_other_users(
        self, habit_repo, habit_factory, mark_days, other_user_id
    ):
        habit = habit_factory()
        mark_days(habit, date(2024, 3, 10), 2)
        assert habit_repo.list_records(habit.id, user_id=other_user_id) == []

    def test_delete_records(self, habit_repo, habit_factory, mark_days, user_id):
        habit = habit_factory()
        mark_days(habit, date(2024, 3, 10), 4)

        assert habit_repo.delete_records(habit.id, user_id=user_id) == 4
        assert habit_repo.list_records(habit.id, user_id=user_id) == []

    def test_archive_writes_history_and_deactivates(
        self, habit_repo, habit_factory, mark_days, user_id, session_factory
    ):
        habit = habit_factory()
        mark_days(habit, date(2024, 3, 10), 2)
        history = HabitHistory(
            user_id=user_id,
            title=habit.title,
            category=habit.category,
            start_date=habit.start_date,
            end_date=date(2024, 3, 12),
            total_days=14,
            completed_days=2,
            status="abandoned",
        )

        stored = habit_repo.archive(habit.id, history, user_id=user_id, delete_records=True)

        assert stored.id is not None
        assert habit_repo.get_by_id(habit.id, user_id=user_id).is_active is False
        with session_factory() as session:
            assert session.exec(select(HabitRecord)).all() == []

    def test_archive_keeps_records_when_asked(self, habit_repo, habit_factory, mark_days, user_id):
        habit = habit_factory()
        mark_days(habit, date(2024, 3, 10), 2)
        history = HabitHistory(
            title=habit.title,
            category=habit.category,
            start_date=habit.start_date,
            end_date=date(2024, 3, 11),
            total_days=14,
            completed_days=2,
            status="completed",
        )

        habit_repo.archive(habit.id, history, user_id=user_id, delete_records=False)
        assert len(habit_repo.list_records(habit.id, user_id=user_id)) == 2

    def test_archive_foreign_habit(self, habit_repo, habit_factory, other_user_id):
        habit = habit_factory()
        history = HabitHistory(
            title="x",
            category="other",
            start_date=date(2024, 3, 10),
            end_date=date(2024, 3, 10),
            total_days=14,
            completed_days=0,
            status="abandoned",
        )
        with pytest.raises(NotFound):
            habit_repo.archive(habit.id, history, user_id=other_user_id, delete_records=True)

    def test_history_order_and_lookup(self, habit_repo, session_factory, user_id):
        start = date(2024, 1, 1)
        with session_factory() as session:
            for offset, status in ((5, "completed"), (20, "abandoned"), (12, "completed")):
                session.add(
                    HabitHistory(
                        user_id=user_id,
                        title=f"Habit {offset}",
                        category="other",
                        start_date=start,
                        end_date=start + timedelta(days=offset),
                        total_days=14,
                        completed_days=offset,
                        status=status,
                    )
                )

        rows = habit_repo.list_history(user_id=user_id)
        assert [r.completed_days for r in rows] == [20, 12, 5]
        completed = habit_repo.list_history(user_id=user_id, status="completed")
        assert [r.completed_days for r in completed] == [12, 5]

        found = habit_repo.find_history(
            user_id=user_id, title="Habit 20", start_date=start, status="abandoned"
        )
        assert found is not None
        assert (
            habit_repo.find_history(
                user_id=user_id, title="Habit 20", start_date=start, status="completed"
            )
            is None
        )


class TestUserRepository:
    def test_ensure_creates_once(self, user_repo):
        first = user_repo.ensure("abc", "abc@example.com", name="Abby", avatar_url="https://img/a.png")
        second = user_repo.ensure("abc", "abc@example.com", name="Ignored")

        assert first.id == second.id == "abc"
        assert second.name == "Abby"
        assert second.day_start_time == "05:00"

    def test_ensure_email_taken_by_other_subject(self, user_repo):
        user_repo.ensure("abc", "shared@example.com")
        with pytest.raises(ConflictError):
            user_repo.ensure("xyz", "shared@example.com")

    def test_update_day_start_time(self, user_repo, user_id):
        updated = user_repo.update_day_start_time(user_id, "06:30")
        assert updated.day_start_time == "06:30"
        assert user_repo.get_by_id(user_id).day_start_time == "06:30"

    def test_update_missing_user(self, user_repo):
        with pytest.raises(NotFound):
            user_repo.update_day_start_time("ghost", "06:00")

    def test_get_missing_user(self, user_repo, session_factory):
        assert user_repo.get_by_id("ghost") is None
        with session_factory() as session:
            assert session.exec(select(User)).all() == []
