# src/tasktree/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Components receive settings by injection; tests pass a SimpleNamespace.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTREE"

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

    # ---- Connectors ----
    console_enabled: bool
    console_user_id: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    users_dir: Path

    # ---- Storage tuning ----
    backup_keep: int
    config_backup_keep: int

    # ---- Conversational sessions ----
    session_ttl_seconds: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "tasktree") or "tasktree"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        console_user_id = _env(_k("CONSOLE_USER_ID"), "console").strip() or "console"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/tasktree"))
        users_dir = _env_path(_k("USERS_DIR"), data_dir / "users")

        backup_keep = max(0, _env_int(_k("BACKUP_KEEP"), 10))
        config_backup_keep = max(0, _env_int(_k("CONFIG_BACKUP_KEEP"), 5))
        session_ttl_seconds = max(1, _env_int(_k("SESSION_TTL_SECONDS"), 300))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            console_user_id=console_user_id,
            data_dir=data_dir,
            users_dir=users_dir,
            backup_keep=backup_keep,
            config_backup_keep=config_backup_keep,
            session_ttl_seconds=session_ttl_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
