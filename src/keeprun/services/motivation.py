"""Canned encouragement shown while a habit run is in progress."""

from __future__ import annotations

import random
from typing import Optional

MOTIVATION_MESSAGES: tuple[str, ...] = (
    "Day 1 done. Every streak starts with a single check mark.",
    "Day 2. Showing up again is what turns an idea into a habit.",
    "Day 3. The first few days are the hardest, and you are through them.",
    "Day 4. Your routine is starting to take shape.",
    "Day 5. Five days in a row is a real pattern now.",
    "Day 6. Tomorrow marks a full week, keep it rolling.",
    "Day 7. One whole week! Halfway to your goal.",
    "Day 8. Past the halfway mark and still going strong.",
    "Day 9. This is starting to feel like part of your day.",
    "Day 10. Double digits. Look how far you have come.",
    "Day 11. Only a few days left, stay steady.",
    "Day 12. Your future self is already thanking you.",
    "Day 13. One more day after today. Finish strong.",
    "Day 14. Two weeks without a break. You made it a habit!",
)

RESET_MESSAGES: tuple[str, ...] = (
    "Missing a couple of days happens. A fresh start is still a start.",
    "Habits are built by coming back, not by never slipping. Try again today.",
    "The run reset, but everything you learned stays with you.",
    "Day 1 again is not failure. It is practice.",
    "Take a breath, pick a smaller step, and start a new run.",
)


def message_for_day(day: int) -> Optional[str]:
    """Return the encouragement for ``day`` (1-based), or ``None`` out of range."""

    if day < 1 or day > len(MOTIVATION_MESSAGES):
        return None
    return MOTIVATION_MESSAGES[day - 1]


def random_reset_message(rng: random.Random | None = None) -> str:
    """Pick one of the reset messages uniformly at random."""

    return (rng or random).choice(RESET_MESSAGES)


__all__ = ["MOTIVATION_MESSAGES", "RESET_MESSAGES", "message_for_day", "random_reset_message"]
