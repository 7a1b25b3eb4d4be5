"""Tests for history snapshots."""

from __future__ import annotations

from datetime import date

import pytest

from keeprun.models import Habit, HabitStatus
from keeprun.services.archiver import snapshot


@pytest.fixture
def habit():
    return Habit(
        id=4,
        user_id="user-1",
        title="Read 10 pages",
        category="learning",
        start_date=date(2024, 3, 1),
        target_days=14,
        is_active=True,
    )


def test_snapshot_copies_habit_fields(habit):
    row = snapshot(habit, 9, HabitStatus.ABANDONED, end_date=date(2024, 3, 12))

    assert row.id is None
    assert row.user_id == "user-1"
    assert row.title == "Read 10 pages"
    assert row.category == "learning"
    assert row.start_date == date(2024, 3, 1)
    assert row.end_date == date(2024, 3, 12)
    assert row.total_days == 14
    assert row.completed_days == 9
    assert row.status == "abandoned"


def test_snapshot_accepts_plain_status_string(habit):
    row = snapshot(habit, 14, "completed", end_date=date(2024, 3, 14))
    assert row.status == HabitStatus.COMPLETED.value


def test_snapshot_rejects_unknown_status(habit):
    with pytest.raises(ValueError):
        snapshot(habit, 1, "paused", end_date=date(2024, 3, 2))
