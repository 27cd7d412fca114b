# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktree.cli.bootstrap import create_initial_state
from tasktree.core.state import AppState
from tasktree.tasks.task_manager import TaskTreeManager
from tasktree.tasks.task_store import UserTaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasktree-test",
        log_level="DEBUG",
        console_enabled=False,
        console_user_id="console",
        data_dir=tmp_path,
        users_dir=tmp_path / "users",
        backup_keep=10,
        config_backup_keep=5,
        session_ttl_seconds=300,
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    return create_initial_state(settings=settings)


@pytest.fixture()
def store(settings: SimpleNamespace) -> UserTaskStore:
    """Real JSON store in tmp: file layout and atomic writes are part of what we test."""
    s = UserTaskStore("u1", root_dir=settings.users_dir, backup_keep=settings.backup_keep)
    s.initialize()
    return s


@pytest.fixture()
def manager(store: UserTaskStore) -> TaskTreeManager:
    return TaskTreeManager(store)
