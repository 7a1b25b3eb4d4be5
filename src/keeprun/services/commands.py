"""Typed habit commands and their dispatcher.

Each request variant carries its own payload and is selected by the
``type`` tag, so a body such as ``{"type": "record", "habitId": 3,
"completed": true}`` parses straight into ``RecordCompletion``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models.habit import DEFAULT_TARGET_DAYS
from .continuity import HabitContinuityEngine, habit_to_dict, history_to_dict


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)


class CreateHabit(_Command):
    type: Literal["create"] = "create"
    title: str = Field(min_length=1, max_length=100)
    category: str = Field(min_length=1)
    target_days: int = Field(default=DEFAULT_TARGET_DAYS, alias="targetDays", ge=1, le=365)


class RecordCompletion(_Command):
    type: Literal["record"] = "record"
    habit_id: int = Field(alias="habitId")
    completed: bool
    day_start_time: Optional[str] = Field(default=None, alias="dayStartTime")


class CompleteHabit(_Command):
    type: Literal["complete"] = "complete"
    habit_id: int = Field(alias="habitId")


class ResetHabit(_Command):
    type: Literal["reset"] = "reset"
    habit_id: Optional[int] = Field(default=None, alias="habitId")


HabitCommand = Annotated[
    Union[CreateHabit, RecordCompletion, CompleteHabit, ResetHabit],
    Field(discriminator="type"),
]
_COMMAND_ADAPTER: TypeAdapter[Any] = TypeAdapter(HabitCommand)


def first_error_message(exc: PydanticValidationError) -> str:
    """Condense a pydantic error into one short line for API clients."""

    errors = exc.errors(include_url=False)
    if not errors:
        return "Invalid request"
    error = errors[0]
    field = ".".join(str(part) for part in error.get("loc", ()) if part)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def parse_command(payload: Any) -> HabitCommand:
    """Validate a raw JSON body into one of the command variants."""

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return _COMMAND_ADAPTER.validate_python(payload)
    except PydanticValidationError as exc:
        raise ValidationError(first_error_message(exc)) from exc


def dispatch(engine: HabitContinuityEngine, user_id: str, command: HabitCommand) -> dict[str, Any]:
    """Run ``command`` against the engine and return a JSON-ready result."""

    match command:
        case CreateHabit(title=title, category=category, target_days=target_days):
            habit = engine.create_habit(user_id, title, category, target_days)
            return {"habit": habit_to_dict(habit)}
        case RecordCompletion(habit_id=habit_id, completed=completed, day_start_time=start):
            return engine.record_completion(user_id, habit_id, completed, start).to_dict()
        case CompleteHabit(habit_id=habit_id):
            history = engine.complete_habit(user_id, habit_id)
            return {"success": True, "history": history_to_dict(history)}
        case ResetHabit(habit_id=None):
            history = engine.reset_active(user_id)
            return {"success": True, "history": history_to_dict(history)}
        case ResetHabit(habit_id=habit_id):
            history = engine.apply_reset(user_id, habit_id)
            return {"success": True, "history": history_to_dict(history)}
        case _:
            raise ValidationError(f"Unsupported command: {type(command).__name__}")


__all__ = [
    "CompleteHabit",
    "CreateHabit",
    "HabitCommand",
    "RecordCompletion",
    "ResetHabit",
    "dispatch",
    "first_error_message",
    "parse_command",
]
