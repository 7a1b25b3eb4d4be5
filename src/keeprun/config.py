"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "KeepRun"
    DB_FILENAME = "keeprun.db"
    DEBUG = False
    TESTING = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("KEEPRUN_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("KEEPRUN_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("KEEPRUN_DATABASE_URL", self._build_sqlite_url())
        self.TIMEZONE = os.getenv("KEEPRUN_TIMEZONE", "Asia/Tokyo")
        self.DEFAULT_DAY_START_TIME = os.getenv("KEEPRUN_DEFAULT_DAY_START_TIME", "05:00")
        self.AUTH_JWT_SECRET = os.getenv("KEEPRUN_AUTH_JWT_SECRET")
        self.AUTH_AUDIENCE = os.getenv("KEEPRUN_AUTH_AUDIENCE", "authenticated")
        self.CRON_SECRET = os.getenv("KEEPRUN_CRON_SECRET")
        self.CLEANUP_RETENTION_DAYS = _env_int("KEEPRUN_CLEANUP_RETENTION_DAYS", 90)
        self.ENABLE_SCHEDULER = _env_bool("KEEPRUN_ENABLE_SCHEDULER", default=False)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("KEEPRUN_SECRET_KEY must be set in non-dev mode.")
        if not self.DEV_MODE and not self.AUTH_JWT_SECRET:
            raise ValueError("KEEPRUN_AUTH_JWT_SECRET must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite database and logs live."""

        data_root = os.getenv("KEEPRUN_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True

    def __init__(self) -> None:
        super().__init__()
        if not self.AUTH_JWT_SECRET:
            self.AUTH_JWT_SECRET = "dev-jwt-secret"


class TestConfig(DevConfig):
    """Configuration used by the test-suite; never starts the scheduler."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.ENABLE_SCHEDULER = False
