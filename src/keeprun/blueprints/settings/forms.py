"""Payload validation for the settings endpoint."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ...errors import ValidationError
from ...services.commands import first_error_message


class SettingsForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    day_start_time: str = Field(alias="dayStartTime", min_length=1)


def parse_settings(payload: Any) -> SettingsForm:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return SettingsForm.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(first_error_message(exc)) from exc


__all__ = ["SettingsForm", "parse_settings"]
