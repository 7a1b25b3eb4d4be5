"""Blueprint exports."""

from . import admin, habits, settings

__all__ = ["admin", "habits", "settings"]
