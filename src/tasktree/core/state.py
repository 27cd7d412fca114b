# src/tasktree/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from .sessions import SessionStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any
    sessions: SessionStore

    _user_locks: dict[str, threading.RLock] = field(default_factory=dict, repr=False)
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def user_lock(self, user_id: str) -> threading.RLock:
        """
        One lock per user id, shared by every manager opened for that user.

        Serializes load-modify-save cycles inside this process; it does not
        coordinate with other processes writing the same file.
        """
        with self._locks_guard:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._user_locks[user_id] = lock
            return lock
