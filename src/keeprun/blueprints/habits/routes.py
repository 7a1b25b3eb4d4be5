"""Habit routes."""

from __future__ import annotations

from flask import jsonify, request

from ...extensions import get_context, require_user_id
from ...services.commands import dispatch, parse_command
from ...services.continuity import history_to_dict
from . import bp
from .forms import command_payload, history_status_filter, json_body


def _run(payload: dict, status: int = 200):
    user_id = require_user_id()
    engine = get_context().habits
    # An active habit rejects creation before the body is validated
    if payload.get("type") == "create":
        engine.ensure_can_create(user_id)
    command = parse_command(payload)
    result = dispatch(engine, user_id, command)
    return jsonify(result), status


@bp.get("")
def current_habit():
    """Active habit view, or whether a new habit may be started."""

    user_id = require_user_id()
    return jsonify(get_context().habits.current_view(user_id).to_dict())


@bp.post("")
def create_habit():
    return _run(command_payload("create"), status=201)


@bp.post("/<int:habit_id>/record")
def record_habit(habit_id: int):
    """Upsert today's completion flag for the habit."""

    return _run(command_payload("record", habitId=habit_id))


@bp.post("/<int:habit_id>/complete")
def complete_habit(habit_id: int):
    return _run(command_payload("complete", habitId=habit_id))


@bp.post("/<int:habit_id>/reset")
def reset_habit(habit_id: int):
    return _run(command_payload("reset", habitId=habit_id))


@bp.post("/reset")
def reset_active_habit():
    """Abandon whichever habit is currently active."""

    return _run(command_payload("reset", habitId=None))


@bp.post("/commands")
def run_command():
    """Single entry point taking a ``type``-tagged command body."""

    payload = json_body()
    status = 201 if payload.get("type") == "create" else 200
    return _run(payload, status=status)


@bp.get("/history")
def habit_history():
    user_id = require_user_id()
    status = history_status_filter(request.args.get("status"))
    rows = get_context().habits.history(user_id, status)
    return jsonify([history_to_dict(row) for row in rows])
