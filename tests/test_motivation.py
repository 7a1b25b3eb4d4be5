"""Tests for motivation and reset messages."""

from __future__ import annotations

import random

from keeprun.services.motivation import (
    MOTIVATION_MESSAGES,
    RESET_MESSAGES,
    message_for_day,
    random_reset_message,
)


def test_one_distinct_message_per_day():
    assert len(MOTIVATION_MESSAGES) == 14
    assert len(set(MOTIVATION_MESSAGES)) == 14


def test_message_for_day_is_one_based():
    assert message_for_day(1) == MOTIVATION_MESSAGES[0]
    assert message_for_day(14) == MOTIVATION_MESSAGES[13]


def test_message_out_of_range_is_none():
    assert message_for_day(0) is None
    assert message_for_day(15) is None
    assert message_for_day(-3) is None


def test_random_reset_message_comes_from_pool():
    rng = random.Random(3)
    picks = {random_reset_message(rng) for _ in range(50)}
    assert picks <= set(RESET_MESSAGES)
    assert len(picks) > 1
    assert random_reset_message() in RESET_MESSAGES
