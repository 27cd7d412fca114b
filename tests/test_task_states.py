# tests/test_task_states.py

from __future__ import annotations

import pytest

from tasktree.tasks.errors import UnknownStateError
from tasktree.tasks.task_models import DEFAULT_TASK_STATES, TaskState
from tasktree.tasks.task_states import (
    default_state,
    final_state,
    find_state,
    has_state,
    is_final,
    next_state,
)

STATES = list(DEFAULT_TASK_STATES)


def test_default_progression() -> None:
    assert default_state(STATES) == "todo"
    assert next_state("todo", STATES) == "currently_doing"
    assert next_state("currently_doing", STATES) == "done"
    assert next_state("done", STATES) is None
    assert final_state(STATES) == "done"


def test_unknown_state_is_not_the_same_as_final() -> None:
    with pytest.raises(UnknownStateError) as exc:
        next_state("blocked", STATES, task_id=4)
    assert exc.value.task_id == 4
    assert exc.value.state == "blocked"


def test_custom_states_and_names() -> None:
    lanes = ["backlog", "review", "shipped", "archived"]
    assert next_state("review", lanes) == "shipped"
    assert is_final("archived", lanes)
    assert not is_final("shipped", lanes)
    assert has_state("backlog", lanes)
    assert not has_state("todo", lanes)


def test_find_state_returns_display_info() -> None:
    found = find_state("currently_doing", STATES)
    assert isinstance(found, TaskState)
    assert found.hex_color == "#ab47bc"
    assert find_state("nope", STATES) is None


def test_empty_configuration() -> None:
    with pytest.raises(ValueError):
        final_state([])
    with pytest.raises(ValueError):
        default_state([])
    assert not is_final("done", [])
