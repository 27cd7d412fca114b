# src/tasktree/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task core.

The tree manager depends on this Protocol instead of the concrete JSON store,
which keeps storage swappable and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import StorageFile


class TaskStorage(Protocol):
    """Whole-document persistence for one user's forest."""

    user_id: str

    def load(self) -> StorageFile: ...
    def save(self, data: StorageFile) -> None: ...
