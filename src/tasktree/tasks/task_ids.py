# src/tasktree/tasks/task_ids.py

"""
Task id allocation.

Ids are small non-negative integers unique across the whole forest. New ids
append when the existing ids are exactly 0..n-1, otherwise the lowest gap left
by a deletion is reused. The desktop tool allocates the same way, so both
sides agree on the next id for the same file.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import DuplicateIdError
from .task_models import Task


def collect_ids(tasks: Iterable[Task]) -> list[int]:
    ids: list[int] = []
    for root in tasks:
        for task in root.walk():
            if task.id is not None:
                ids.append(task.id)
    return ids


def allocate_id(existing: Iterable[int]) -> int:
    ids = list(existing)
    if not ids:
        return 0

    if max(ids) == len(ids) - 1:
        return len(ids)

    used = set(ids)
    candidate = 0
    while candidate in used:
        candidate += 1
    return candidate


def resolve_id(existing: Iterable[int], requested: int | None = None, *, force: bool = False) -> int:
    """
    Pick the id for a new task.

    A requested id is honored when unused. On collision, `force=True` raises
    DuplicateIdError; otherwise a fresh id is allocated.
    """
    ids = list(existing)
    if requested is None:
        return allocate_id(ids)

    if isinstance(requested, bool) or not isinstance(requested, int) or requested < 0:
        raise ValueError(f"Task id must be a non-negative integer, got {requested!r}")

    if requested not in ids:
        return requested
    if force:
        raise DuplicateIdError(requested)
    return allocate_id(ids)
