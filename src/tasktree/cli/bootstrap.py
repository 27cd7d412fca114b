# src/tasktree/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the session store into AppState.

Per-user stores and managers are opened on demand through tasks.task_api.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.sessions import SessionStore
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.users_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        sessions=SessionStore(ttl_seconds=getattr(settings, "session_ttl_seconds", 300)),
    )
    logger.debug("AppState ready users_dir=%s", settings.users_dir)
    return state
