"""Flask wiring: application context, identity resolution and error handlers."""

from __future__ import annotations

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .auth import Identity, bearer_token
from .context import AppContext
from .errors import KeepRunError, Unauthorized
from .logging_config import get_logger

EXTENSION_KEY = "keeprun"

logger = get_logger("extensions")


def init_context(app: Flask, ctx: AppContext) -> None:
    """Attach ``ctx`` to ``app`` so views and CLI commands can reach it."""

    app.extensions[EXTENSION_KEY] = ctx


def get_context() -> AppContext:
    """Return the ``AppContext`` of the running Flask app."""

    try:
        return current_app.extensions[EXTENSION_KEY]
    except KeyError as exc:  # pragma: no cover - only when create_app was bypassed
        raise RuntimeError("Keep Run context not initialized") from exc


def current_identity() -> Identity:
    """Verify the request's bearer token and make sure a profile row exists."""

    identity = g.get("keeprun_identity")
    if identity is not None:
        return identity

    ctx = get_context()
    identity = ctx.verifier.verify(bearer_token(request.headers.get("Authorization")))
    ctx.user_repo.ensure(
        identity.user_id,
        identity.email,
        name=identity.name,
        avatar_url=identity.avatar_url,
    )
    g.keeprun_identity = identity
    return identity


def require_user_id() -> str:
    return current_identity().user_id


def register_error_handlers(app: Flask) -> None:
    """Render every failure as ``{"error": message}`` with a matching status."""

    @app.errorhandler(KeepRunError)
    def _handle_domain_error(exc: KeepRunError):
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc.message, extra={"path": request.path})
        elif not isinstance(exc, Unauthorized):
            logger.info(
                "Request rejected: %s",
                exc.message,
                extra={"path": request.path, "error_kind": type(exc).__name__},
            )
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code or 500

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.path})
        return jsonify({"error": "Internal server error"}), 500
