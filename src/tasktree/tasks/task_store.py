# src/tasktree/tasks/task_store.py

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from ..util.fs import atomic_write_json
from .errors import CorruptStorageError, StorageIOError
from .task_models import StorageFile

logger = logging.getLogger(__name__)

TASKS_FILENAME = "tasks.json"
BACKUP_DIRNAME = ".backups"
BACKUP_PREFIX = "tasks-"
BACKUP_SUFFIX = ".json"

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def validate_user_id(user_id: str) -> str:
    """User ids become directory names; refuse anything that could escape the root."""
    uid = str(user_id or "").strip()
    if not uid or uid in (".", "..") or "/" in uid or "\\" in uid or "\0" in uid:
        raise ValueError(f"Invalid user id: {user_id!r}")
    return uid


def backup_stamp(dt: datetime) -> str:
    # Fixed width, so lexicographic order == chronological order.
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")


class UserTaskStore:
    """
    Per-user JSON task store.

    Layout:
      <root_dir>/<user_id>/tasks.json
      <root_dir>/<user_id>/.backups/tasks-<utc stamp>.json

    The whole document is rewritten on every save:
    - the previous primary file is copied into .backups first
    - the new content goes to a temp file in the same directory and is
      renamed over the primary file
    - backups beyond `backup_keep` are pruned, oldest first

    No caching: every load() reads the file again.
    """

    def __init__(self, user_id: str, *, root_dir: str | Path, backup_keep: int = 10) -> None:
        self.user_id = validate_user_id(user_id)
        self.user_dir = Path(root_dir) / self.user_id
        self.tasks_file = self.user_dir / TASKS_FILENAME
        self.backup_dir = self.user_dir / BACKUP_DIRNAME
        self.backup_keep = max(0, int(backup_keep))

    # ---- lifecycle ----

    def initialize(self) -> None:
        try:
            self.user_dir.mkdir(parents=True, exist_ok=True)
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(self.user_dir, "create directory", str(e)) from e

        if self.tasks_file.exists():
            return

        try:
            atomic_write_json(self.tasks_file, StorageFile.default().to_dict())
        except OSError as e:
            raise StorageIOError(self.tasks_file, "write", str(e)) from e
        logger.info("Initialized task storage user=%s path=%s", self.user_id, self.tasks_file)

    # ---- read ----

    def _read_raw(self, path: Path) -> Any:
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptStorageError(path, "not UTF-8 text") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(path, f"not valid JSON ({e.msg} at line {e.lineno})") from e

    @staticmethod
    def _parse(path: Path, raw: Any) -> StorageFile:
        if not isinstance(raw, dict):
            raise CorruptStorageError(path, "top level is not an object")
        meta = raw.get("meta")
        if not isinstance(meta, dict) or not isinstance(meta.get("states"), list):
            raise CorruptStorageError(path, "missing meta.states list")
        if not isinstance(raw.get("datas"), list):
            raise CorruptStorageError(path, "missing datas list")
        try:
            return StorageFile.from_dict(raw)
        except ValueError as e:
            raise CorruptStorageError(path, str(e)) from e

    def load(self) -> StorageFile:
        try:
            raw = self._read_raw(self.tasks_file)
        except FileNotFoundError:
            self.initialize()
            return StorageFile.default()
        except OSError as e:
            raise StorageIOError(self.tasks_file, "read", str(e)) from e

        return self._parse(self.tasks_file, raw)

    def is_empty(self) -> bool:
        return not self.load().datas

    # ---- write ----

    def _next_backup_path(self) -> Path:
        dt = datetime.now(timezone.utc)
        path = self.backup_dir / f"{BACKUP_PREFIX}{backup_stamp(dt)}{BACKUP_SUFFIX}"
        while path.exists():
            dt += timedelta(microseconds=1)
            path = self.backup_dir / f"{BACKUP_PREFIX}{backup_stamp(dt)}{BACKUP_SUFFIX}"
        return path

    def _backup_current(self) -> Path | None:
        if not self.tasks_file.exists():
            return None
        backup_path = self._next_backup_path()
        try:
            shutil.copyfile(self.tasks_file, backup_path)
        except OSError as e:
            raise StorageIOError(backup_path, "back up to", str(e)) from e
        logger.debug("Backed up %s -> %s", self.tasks_file, backup_path.name)
        return backup_path

    def save(self, data: StorageFile) -> None:
        try:
            self.user_dir.mkdir(parents=True, exist_ok=True)
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(self.user_dir, "create directory", str(e)) from e

        self._backup_current()

        try:
            atomic_write_json(self.tasks_file, data.to_dict())
        except OSError as e:
            raise StorageIOError(self.tasks_file, "write", str(e)) from e
        logger.debug("Saved tasks user=%s top_level=%d", self.user_id, len(data.datas))

        self.prune_backups()

    # ---- backups ----

    def list_backups(self) -> list[str]:
        """Backup file names, most recent first."""
        try:
            names = [
                p.name
                for p in self.backup_dir.iterdir()
                if p.is_file() and p.name.startswith(BACKUP_PREFIX) and p.name.endswith(BACKUP_SUFFIX)
            ]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageIOError(self.backup_dir, "list", str(e)) from e
        return sorted(names, reverse=True)

    def prune_backups(self, keep: int | None = None) -> list[str]:
        """
        Delete backups beyond the newest `keep` (default: backup_keep).

        Failures are logged and never raised: a save that already landed must
        not be reported as failed because cleanup did not.
        """
        keep = self.backup_keep if keep is None else max(0, int(keep))
        removed: list[str] = []
        try:
            stale = self.list_backups()[keep:]
        except StorageIOError:
            logger.warning("Failed to list backups for pruning user=%s", self.user_id, exc_info=True)
            return removed

        for name in stale:
            try:
                (self.backup_dir / name).unlink()
                removed.append(name)
            except OSError:
                logger.warning("Failed to delete backup %s user=%s", name, self.user_id, exc_info=True)
        if removed:
            logger.debug("Pruned %d backups user=%s", len(removed), self.user_id)
        return removed

    def restore_backup(self, name: str) -> None:
        """
        Make backup `name` the primary file again.

        Goes through save(), so the state being replaced is backed up as well.
        """
        if name not in self.list_backups():
            raise StorageIOError(self.backup_dir / str(name), "restore", "no such backup")

        path = self.backup_dir / name
        try:
            raw = self._read_raw(path)
        except OSError as e:
            raise StorageIOError(path, "read", str(e)) from e

        self.save(self._parse(path, raw))
        logger.info("Restored tasks user=%s from backup %s", self.user_id, name)

    # ---- modification detection ----

    def last_modified(self) -> datetime:
        try:
            mtime = self.tasks_file.stat().st_mtime
        except FileNotFoundError:
            return _EPOCH
        except OSError as e:
            raise StorageIOError(self.tasks_file, "stat", str(e)) from e
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def was_modified_since(self, ts: datetime) -> bool:
        """
        True if the primary file changed after `ts` (for example written by the
        desktop client). Informational only; nothing here blocks writers.
        """
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        if not self.tasks_file.exists():
            return False
        return self.last_modified() > ts
