# src/tasktree/tasks/task_api.py

"""
Entry points for collaborators (connectors, exporters).

Everything goes through AppState so that all managers for one user share the
same lock and the same settings-derived paths.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from ..core.state import AppState
from ..core.user_config import UserConfig
from .task_manager import TaskTreeManager
from .task_store import UserTaskStore, validate_user_id

logger = logging.getLogger(__name__)


def open_task_store(state: AppState, user_id: str) -> UserTaskStore:
    store = UserTaskStore(
        user_id,
        root_dir=state.settings.users_dir,
        backup_keep=int(getattr(state.settings, "backup_keep", 10)),
    )
    # First-time creation races with saves from other threads otherwise.
    with state.user_lock(store.user_id):
        store.initialize()
    return store


def open_task_manager(state: AppState, user_id: str) -> TaskTreeManager:
    store = open_task_store(state, user_id)
    return TaskTreeManager(store, lock=state.user_lock(store.user_id))


def open_user_config(state: AppState, user_id: str) -> UserConfig:
    uid = validate_user_id(user_id)
    cfg = UserConfig(
        uid,
        root_dir=state.settings.users_dir,
        backup_keep=int(getattr(state.settings, "config_backup_keep", 5)),
        lock=state.user_lock(uid),
    )
    cfg.initialize()
    return cfg


def export_tasks_file(state: AppState, user_id: str, *, now: datetime | None = None) -> tuple[Path, str]:
    """
    Path of the user's raw tasks.json plus a download name like
    tasks_20240131_154502.json. The file is the exact on-disk document, so
    the desktop tool can import it as is.
    """
    store = open_task_store(state, user_id)
    now = now or datetime.now()
    filename = f"tasks_{now.strftime('%Y%m%d_%H%M%S')}.json"
    logger.info("Export requested user=%s file=%s", store.user_id, store.tasks_file)
    return store.tasks_file, filename
