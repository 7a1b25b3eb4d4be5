"""Request payload helpers for habit endpoints."""

from __future__ import annotations

from typing import Any, Optional

from flask import request

from ...errors import ValidationError
from ...models.habit import HabitStatus

HISTORY_STATUS_ALL = "all"


def json_body() -> dict[str, Any]:
    """Return the request's JSON object, treating an empty body as ``{}``."""

    if not request.data:
        return {}
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def command_payload(command_type: str, **path_values: Any) -> dict[str, Any]:
    """Merge the JSON body with the command tag and any URL parameters."""

    payload = dict(json_body())
    payload.update(path_values)
    payload["type"] = command_type
    return payload


def history_status_filter(raw: Optional[str]) -> Optional[str]:
    """Map ``?status=`` to a history status; completed runs are the default."""

    if raw is None or raw == "":
        return HabitStatus.COMPLETED.value
    if raw == HISTORY_STATUS_ALL:
        return None
    try:
        return HabitStatus(raw).value
    except ValueError as exc:
        raise ValidationError("Unknown history status") from exc


__all__ = ["command_payload", "history_status_filter", "json_body"]
