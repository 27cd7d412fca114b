# tests/test_task_ids.py

from __future__ import annotations

import pytest

from tasktree.tasks.errors import DuplicateIdError
from tasktree.tasks.task_ids import allocate_id, collect_ids, resolve_id
from tasktree.tasks.task_models import Task


def test_allocate_empty_is_zero() -> None:
    assert allocate_id([]) == 0


@pytest.mark.parametrize("n", [1, 2, 5, 17])
def test_allocate_without_gaps_appends(n: int) -> None:
    ids = list(range(n))
    assert allocate_id(ids) == n
    assert allocate_id(reversed(ids)) == n


@pytest.mark.parametrize(
    "ids, expected",
    [
        ([1], 0),
        ([0, 2], 1),
        ([0, 1, 3, 4], 2),
        ([5, 6, 7], 0),
        ([0, 1, 2, 10], 3),
    ],
)
def test_allocate_fills_lowest_gap(ids: list[int], expected: int) -> None:
    assert allocate_id(ids) == expected


def test_collect_ids_walks_nested_subtasks() -> None:
    forest = [
        Task(id=0, subtasks=[Task(id=3, subtasks=[Task(id=4)]), Task(id=1)]),
        Task(id=2),
        Task(name="no id"),
    ]
    assert sorted(collect_ids(forest)) == [0, 1, 2, 3, 4]
    assert allocate_id(collect_ids(forest)) == 5


def test_resolve_id_honors_free_request() -> None:
    assert resolve_id([0, 1], 7) == 7


def test_resolve_id_collision_allocates_or_raises() -> None:
    assert resolve_id([0, 1], 1) == 2
    with pytest.raises(DuplicateIdError):
        resolve_id([0, 1], 1, force=True)


@pytest.mark.parametrize("bad", [-1, "3", True])
def test_resolve_id_rejects_bad_requests(bad) -> None:
    with pytest.raises(ValueError):
        resolve_id([], bad)
