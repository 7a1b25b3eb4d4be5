"""User settings routes."""

from __future__ import annotations

from flask import jsonify, request

from ...extensions import get_context, require_user_id
from . import bp
from .forms import parse_settings


@bp.get("")
def read_settings():
    user_id = require_user_id()
    return jsonify({"dayStartTime": get_context().settings.get_day_start_time(user_id)})


@bp.put("")
def update_settings():
    user_id = require_user_id()
    form = parse_settings(request.get_json(silent=True))
    value = get_context().settings.update_day_start_time(user_id, form.day_start_time)
    return jsonify({"dayStartTime": value, "message": "Settings updated successfully"})
