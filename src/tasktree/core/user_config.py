# src/tasktree/core/user_config.py

"""
Per-user display settings stored next to tasks.json.

File shape:
  {"version": "1.0", "config": {"hideCompleted": false}, "updatedAt": "DD/MM/YYYY"}

Missing keys are filled from defaults on load, unknown keys are kept, so
files written by older or newer versions keep working.
"""

from __future__ import annotations

import json
import logging
import shutil
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from ..tasks import timestamp
from ..tasks.errors import StorageIOError
from ..tasks.task_store import backup_stamp, validate_user_id
from ..util.fs import atomic_write_json

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
CONFIG_VERSION = "1.0"
CONFIG_BACKUP_PREFIX = "config-"

DEFAULT_USER_CONFIG: dict[str, Any] = {
    "hideCompleted": False,
}


class UserConfig:
    def __init__(
        self,
        user_id: str,
        *,
        root_dir: str | Path,
        backup_keep: int = 5,
        lock: threading.RLock | None = None,
    ) -> None:
        self.user_id = validate_user_id(user_id)
        self.user_dir = Path(root_dir) / self.user_id
        self.config_file = self.user_dir / CONFIG_FILENAME
        self.backup_dir = self.user_dir / ".backups"
        self.backup_keep = max(0, int(backup_keep))
        self._config: dict[str, Any] = dict(DEFAULT_USER_CONFIG)
        # Share the per-user task lock so concurrent updates do not lose writes.
        self._lock = lock if lock is not None else threading.RLock()

    def initialize(self) -> None:
        """Load the stored config, or write defaults if it is missing or unreadable."""
        try:
            self.user_dir.mkdir(parents=True, exist_ok=True)
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(self.user_dir, "create directory", str(e)) from e

        with self._lock:
            if self._load():
                return
            self._config = dict(DEFAULT_USER_CONFIG)
            self.save()

    def _load(self) -> bool:
        try:
            raw = json.loads(self.config_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return False
        except (OSError, ValueError):
            logger.warning("Unreadable config for user=%s, resetting to defaults", self.user_id, exc_info=True)
            return False

        stored = raw.get("config") if isinstance(raw, dict) else None
        if not isinstance(stored, dict):
            logger.warning("Config for user=%s has no config object, resetting to defaults", self.user_id)
            return False

        self._config = {**DEFAULT_USER_CONFIG, **stored}
        return True

    def save(self) -> None:
        payload = {
            "version": CONFIG_VERSION,
            "config": self._config,
            "updatedAt": timestamp.now(),
        }

        if self.config_file.exists():
            self._backup_current()

        try:
            atomic_write_json(self.config_file, payload)
        except OSError as e:
            raise StorageIOError(self.config_file, "write", str(e)) from e

        self._prune_backups()

    def _backup_current(self) -> None:
        dt = datetime.now(timezone.utc)
        path = self.backup_dir / f"{CONFIG_BACKUP_PREFIX}{backup_stamp(dt)}.json"
        while path.exists():
            dt += timedelta(microseconds=1)
            path = self.backup_dir / f"{CONFIG_BACKUP_PREFIX}{backup_stamp(dt)}.json"
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.config_file, path)
        except OSError as e:
            raise StorageIOError(path, "back up to", str(e)) from e

    def list_backups(self) -> list[str]:
        try:
            names = [
                p.name
                for p in self.backup_dir.iterdir()
                if p.name.startswith(CONFIG_BACKUP_PREFIX) and p.name.endswith(".json")
            ]
        except OSError:
            return []
        return sorted(names, reverse=True)

    def _prune_backups(self) -> None:
        for name in self.list_backups()[self.backup_keep :]:
            try:
                (self.backup_dir / name).unlink()
            except OSError:
                logger.warning("Failed to delete config backup %s user=%s", name, self.user_id, exc_info=True)

    # ---- accessors ----

    def get_config(self) -> dict[str, Any]:
        return dict(self._config)

    def update_config(self, **changes: Any) -> None:
        """Apply `changes` on top of what is on disk now, not on a stale copy."""
        with self._lock:
            self._load()
            self._config = {**self._config, **changes}
            self.save()

    @property
    def hide_completed(self) -> bool:
        return bool(self._config.get("hideCompleted", False))

    def set_hide_completed(self, value: bool) -> None:
        self.update_config(hideCompleted=bool(value))

    def toggle_hide_completed(self) -> bool:
        with self._lock:
            self._load()
            new_value = not self.hide_completed
            self.set_hide_completed(new_value)
            return new_value

    def reset_to_defaults(self) -> None:
        with self._lock:
            self._config = dict(DEFAULT_USER_CONFIG)
            self.save()
