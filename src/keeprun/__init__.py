"""Keep Run application factory."""

from __future__ import annotations

import random
from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify

from . import cli as _cli
from .config import BaseConfig, DevConfig, TestConfig
from .services.day_boundary import Clock, system_clock

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    yield "keeprun.blueprints.habits"
    yield "keeprun.blueprints.settings"
    yield "keeprun.blueprints.admin"


def create_app(
    config_name: str | None = None,
    *,
    config: BaseConfig | None = None,
    clock: Clock = system_clock,
    rng: random.Random | None = None,
) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_obj = config or _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["KEEPRUN_CONFIG"] = config_obj

    from .context import create_app_context
    from .extensions import init_context, register_error_handlers
    from .logging_config import setup_logging
    from .scheduler import create_scheduler

    setup_logging(config_obj)
    ctx = create_app_context(config_obj, clock=clock, rng=rng)
    init_context(app, ctx)
    register_error_handlers(app)
    _register_blueprints(app)
    _cli.init_app(app)

    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    if config_obj.ENABLE_SCHEDULER:
        app.extensions["keeprun_scheduler"] = create_scheduler(ctx, auto_start=True)

    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        app.register_blueprint(getattr(module, "bp"))


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
