"""Archived-data cleanup triggers: one for signed-in users, one for cron."""

from __future__ import annotations

import hmac

from flask import jsonify, request

from ...errors import ConflictError, Unauthorized
from ...extensions import get_context, require_user_id
from ...logging_config import get_logger
from ...services.cleanup import CleanupAlreadyRunning, run_archived_cleanup
from . import bp

logger = get_logger("blueprints.admin")


def _cleanup_response():
    ctx = get_context()
    try:
        result = run_archived_cleanup(
            ctx.session_factory, retention_days=ctx.config.CLEANUP_RETENTION_DAYS
        )
    except CleanupAlreadyRunning as exc:
        raise ConflictError(str(exc)) from exc
    payload = result.to_dict()
    payload["message"] = "Archived data cleanup completed"
    return jsonify(payload)


@bp.post("/archived")
def cleanup_archived():
    user_id = require_user_id()
    logger.info("Manual cleanup requested", extra={"user_id": user_id})
    return _cleanup_response()


@bp.get("/archived")
def cleanup_archived_cron():
    """Cron entry point, guarded by the ``X-Cron-Secret`` header."""

    expected = get_context().config.CRON_SECRET
    provided = request.headers.get("X-Cron-Secret", "")
    if not expected or not hmac.compare_digest(provided, expected):
        raise Unauthorized()
    return _cleanup_response()
