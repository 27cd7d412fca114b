# src/tasktree/tasks/task_states.py

"""
Task progression: an ordered list of states with one forward step
(`next_state`) and one shortcut to the end (`final_state`).

There is no backward transition here; corrections go through a plain edit.
Functions accept TaskState objects or bare names.
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import UnknownStateError
from .task_models import TaskState

StateLike = TaskState | str


def _names(states: Sequence[StateLike]) -> list[str]:
    return [s.name if isinstance(s, TaskState) else str(s) for s in states]


def _require_states(names: list[str]) -> None:
    if not names:
        raise ValueError("No task states configured")


def has_state(name: str, states: Sequence[StateLike]) -> bool:
    return name in _names(states)


def find_state(name: str, states: Sequence[TaskState]) -> TaskState | None:
    for s in states:
        if s.name == name:
            return s
    return None


def next_state(current: str, states: Sequence[StateLike], *, task_id: int | None = None) -> str | None:
    names = _names(states)
    try:
        idx = names.index(current)
    except ValueError:
        raise UnknownStateError(task_id, current) from None

    if idx == len(names) - 1:
        return None
    return names[idx + 1]


def final_state(states: Sequence[StateLike]) -> str:
    names = _names(states)
    _require_states(names)
    return names[-1]


def default_state(states: Sequence[StateLike]) -> str:
    names = _names(states)
    _require_states(names)
    return names[0]


def is_final(name: str, states: Sequence[StateLike]) -> bool:
    names = _names(states)
    return bool(names) and name == names[-1]
