"""Service module exports."""

from . import (
    archiver,
    cleanup,
    commands,
    continuity,
    day_boundary,
    habits,
    motivation,
    user_settings,
)

__all__ = [
    "archiver",
    "cleanup",
    "commands",
    "continuity",
    "day_boundary",
    "habits",
    "motivation",
    "user_settings",
]
