# src/tasktree/core/sessions.py

"""
Short-lived conversational contexts ("the next line is the name of a new task").

One context per user id, each with its own expiry. Contexts live on AppState,
not in module globals, so connectors and tests get isolated stores.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class SessionContext:
    user_id: str
    action: str
    expires_at: float
    data: dict[str, Any] = field(default_factory=dict)


class SessionStore:
    def __init__(self, ttl_seconds: float = 300.0, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._items: dict[str, SessionContext] = {}
        self._lock = threading.Lock()

    def start(self, user_id: str, action: str, data: dict[str, Any] | None = None) -> SessionContext:
        """Begin (or replace) the pending action for `user_id`."""
        ctx = SessionContext(
            user_id=user_id,
            action=action,
            expires_at=self._clock() + self._ttl,
            data=dict(data or {}),
        )
        with self._lock:
            self._items[user_id] = ctx
        return ctx

    def get(self, user_id: str) -> SessionContext | None:
        with self._lock:
            ctx = self._items.get(user_id)
            if ctx is None:
                return None
            if ctx.expires_at <= self._clock():
                del self._items[user_id]
                return None
            return ctx

    def clear(self, user_id: str) -> SessionContext | None:
        with self._lock:
            return self._items.pop(user_id, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [uid for uid, ctx in self._items.items() if ctx.expires_at <= now]
            for uid in stale:
                del self._items[uid]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
