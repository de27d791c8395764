# src/zenflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read at import time except the .env file itself.
- Every path lives under a single local data directory by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "ZENFLOW"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths ----
    data_dir: Path
    db_path: Path
    backup_dir: Path
    log_dir: Path

    # ---- Task list defaults ----
    default_sort_key: str
    default_sort_direction: str
    list_limit: int

    # ---- Startup ----
    seed_on_start: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "zenflow").strip() or "zenflow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/zenflow"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "zenflow.sqlite3")
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        default_sort_key = _env(_k("SORT_KEY"), "PRIORITY").strip().upper() or "PRIORITY"
        default_sort_direction = _env(_k("SORT_DIRECTION"), "DESC").strip().upper() or "DESC"
        list_limit = max(1, _env_int(_k("LIST_LIMIT"), 50))

        seed_on_start = _env_bool(_k("SEED_ON_START"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            db_path=db_path,
            backup_dir=backup_dir,
            log_dir=log_dir,
            default_sort_key=default_sort_key,
            default_sort_direction=default_sort_direction,
            list_limit=list_limit,
            seed_on_start=seed_on_start,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
