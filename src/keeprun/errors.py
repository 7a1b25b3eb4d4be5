"""Error kinds surfaced by the Keep Run core and API."""

from __future__ import annotations


class KeepRunError(Exception):
    """Base class for errors with a short user-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}


class Unauthorized(KeepRunError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(KeepRunError):
    status_code = 404
    default_message = "Habit not found"


class ConflictError(KeepRunError):
    """Raised when a second active habit or a skipped habit slot is requested."""

    status_code = 409
    default_message = "An active habit already exists"


class NotEligibleError(KeepRunError):
    """Raised when a habit is completed before reaching its target."""

    status_code = 400
    default_message = "Habit not completed yet"


class ValidationError(KeepRunError):
    status_code = 400
    default_message = "Invalid request"


class StorageError(KeepRunError):
    """Persistence failure; nothing from the failed operation was stored."""

    status_code = 500
    default_message = "Could not save changes, please try again"


__all__ = [
    "ConflictError",
    "KeepRunError",
    "NotEligibleError",
    "NotFound",
    "StorageError",
    "Unauthorized",
    "ValidationError",
]
