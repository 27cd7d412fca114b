# tests/test_sessions.py

from __future__ import annotations

from fakes import FakeClock

from tasktree.core.sessions import SessionStore


def test_session_expires() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=60, clock=clock)

    sessions.start("u1", "add_task", {"parent_id": 3})
    ctx = sessions.get("u1")
    assert ctx is not None
    assert ctx.action == "add_task"
    assert ctx.data == {"parent_id": 3}

    clock.advance(61)
    assert sessions.get("u1") is None
    assert len(sessions) == 0


def test_sessions_are_per_user_and_replaceable() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=60, clock=clock)

    sessions.start("u1", "add_task")
    sessions.start("u2", "search")
    sessions.start("u1", "search")

    assert sessions.get("u1").action == "search"
    assert sessions.get("u2").action == "search"

    assert sessions.clear("u2") is not None
    assert sessions.get("u2") is None


def test_purge_expired() -> None:
    clock = FakeClock()
    sessions = SessionStore(ttl_seconds=10, clock=clock)
    sessions.start("old", "search")
    clock.advance(5)
    sessions.start("new", "search")
    clock.advance(6)

    assert sessions.purge_expired() == 1
    assert sessions.get("new") is not None
