# src/tasktree/tasks/task_manager.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from ..core.ports import TaskStorage
from . import timestamp
from .errors import InvalidMoveError, NoFurtherStateError, TaskNotFoundError, UnknownStateError
from .task_ids import collect_ids, resolve_id
from .task_models import SearchResult, StorageFile, Task, TaskState
from .task_states import default_state, final_state, has_state, next_state

logger = logging.getLogger(__name__)

DEFAULT_TASK_NAME = "Untitled Task"

# Fields a caller may set through edit(). id/timestamp are fixed at creation,
# tree structure changes go through move()/delete().
EDITABLE_FIELDS = frozenset({"name", "description", "state", "priority"})
ADD_FIELDS = EDITABLE_FIELDS | {"id", "timestamp"}


# ---- tree helpers ----


def find_task(tasks: list[Task], task_id: int) -> Task | None:
    for task in tasks:
        if task.id == task_id:
            return task
        found = find_task(task.children(), task_id)
        if found is not None:
            return found
    return None


def locate_task(tasks: list[Task], task_id: int) -> tuple[list[Task], int] | None:
    """Return (owning list, index) for `task_id`, searching depth-first."""
    for idx, task in enumerate(tasks):
        if task.id == task_id:
            return tasks, idx
        if task.subtasks:
            found = locate_task(task.subtasks, task_id)
            if found is not None:
                return found
    return None


def require_task(tasks: list[Task], task_id: int) -> Task:
    task = find_task(tasks, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def _check_fields(fields: Mapping[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    out = dict(fields or {})
    unknown = sorted(set(out) - allowed)
    if unknown:
        raise ValueError(f"Unsupported task field(s): {', '.join(unknown)}")

    for key in ("name", "description"):
        if key in out and out[key] is not None and not isinstance(out[key], str):
            raise ValueError(f"{key} must be a string")
    if "state" in out and (not isinstance(out["state"], str) or not out["state"]):
        raise ValueError("state must be a non-empty string")
    prio = out.get("priority")
    if prio is not None and (isinstance(prio, bool) or not isinstance(prio, int)):
        raise ValueError("priority must be an integer")
    ts = out.get("timestamp")
    if ts is not None and not timestamp.validate(ts):
        raise ValueError(f"timestamp must be DD/MM/YYYY, got {ts!r}")
    return out


class TaskTreeManager:
    """
    Operations over one user's task forest.

    Every call loads the document from storage, works on that fresh copy and,
    for mutations, saves it back once. Nothing is cached between calls.

    Batches are all-or-nothing: ids are applied in order to the loaded copy and
    the first failure raises before anything is saved.
    """

    def __init__(self, storage: TaskStorage, *, lock: threading.RLock | None = None) -> None:
        self._storage = storage
        self._lock = lock if lock is not None else threading.RLock()

    @property
    def storage(self) -> TaskStorage:
        return self._storage

    # ---- reads ----

    def get(self, task_id: int) -> Task:
        with self._lock:
            return require_task(self._storage.load().datas, task_id)

    def get_all(self) -> list[Task]:
        with self._lock:
            return self._storage.load().datas

    def get_subtasks(self, parent_id: int) -> list[Task]:
        return self.get(parent_id).children()

    def get_meta(self) -> list[TaskState]:
        with self._lock:
            return self._storage.load().states

    def search(self, query: str, include_descriptions: bool = True) -> list[SearchResult]:
        """
        Case-insensitive substring search over names (and descriptions).

        A task matches when any whitespace-separated term occurs in a field.
        Results come back in depth-first forest order, no ranking.
        """
        terms = [t for t in (query or "").lower().split() if t]
        if not terms:
            return []

        with self._lock:
            data = self._storage.load()

        results: list[SearchResult] = []

        def visit(task: Task, path: list[int]) -> None:
            matches: list[str] = []
            if task.name and any(t in task.name.lower() for t in terms):
                matches.append("name")
            if (
                include_descriptions
                and task.description
                and any(t in task.description.lower() for t in terms)
            ):
                matches.append("description")
            if matches:
                results.append(SearchResult(task=task, path=list(path), matches=matches))

            child_path = [*path, task.id] if task.id is not None else path
            for sub in task.children():
                visit(sub, child_path)

        for root in data.datas:
            visit(root, [])
        return results

    def stats(self) -> dict[str, int]:
        with self._lock:
            data = self._storage.load()

        counts: dict[str, int] = {s.name: 0 for s in data.states}
        total = 0
        for task in data.walk():
            total += 1
            key = task.state or "unknown"
            counts[key] = counts.get(key, 0) + 1
        counts["total"] = total
        return counts

    # ---- mutations ----

    def add(self, fields: Mapping[str, Any], parent_id: int | None = None, *, force_id: bool = False) -> int:
        values = _check_fields(fields, ADD_FIELDS)

        with self._lock:
            data = self._storage.load()
            task_id = resolve_id(collect_ids(data.datas), values.get("id"), force=force_id)

            state = values.get("state") or default_state(data.states)
            if not has_state(state, data.states):
                raise UnknownStateError(task_id, state)

            task = Task(
                id=task_id,
                name=values.get("name") or DEFAULT_TASK_NAME,
                description=values.get("description"),
                state=state,
                timestamp=values.get("timestamp") or timestamp.now(),
                priority=values.get("priority"),
            )

            if parent_id is not None:
                parent = require_task(data.datas, parent_id)
                if parent.subtasks is None:
                    parent.subtasks = []
                parent.subtasks.append(task)
            else:
                data.datas.append(task)

            self._storage.save(data)

        logger.debug("Task added id=%s parent=%s state=%s", task_id, parent_id, state)
        return task_id

    def edit(self, ids: Iterable[int], fields: Mapping[str, Any], cascade: bool = False) -> None:
        updates = _check_fields(fields, EDITABLE_FIELDS)
        ids = list(ids)
        if not ids or not updates:
            return

        with self._lock:
            data = self._storage.load()
            self._apply_updates(data, ids, updates, cascade)
            self._storage.save(data)
        logger.debug("Tasks edited ids=%s fields=%s cascade=%s", ids, sorted(updates), cascade)

    def advance_state(self, ids: Iterable[int], cascade: bool = False) -> None:
        ids = list(ids)
        if not ids:
            return

        with self._lock:
            data = self._storage.load()
            for task_id in ids:
                task = require_task(data.datas, task_id)
                nxt = next_state(task.state or "", data.states, task_id=task_id)
                if nxt is None:
                    raise NoFurtherStateError(task_id)
                self._apply_updates(data, [task_id], {"state": nxt}, cascade)
            self._storage.save(data)
        logger.debug("Tasks advanced ids=%s cascade=%s", ids, cascade)

    def complete_state(self, ids: Iterable[int], cascade: bool = False) -> None:
        ids = list(ids)
        if not ids:
            return

        with self._lock:
            data = self._storage.load()
            self._apply_updates(data, ids, {"state": final_state(data.states)}, cascade)
            self._storage.save(data)
        logger.debug("Tasks completed ids=%s cascade=%s", ids, cascade)

    def delete(self, ids: Iterable[int]) -> None:
        """
        Remove each task with its whole subtree.

        Every id must exist before anything is removed. An id that sits inside
        a subtree deleted earlier in the same batch is already gone and is
        skipped.
        """
        ids = list(ids)
        if not ids:
            return

        with self._lock:
            data = self._storage.load()
            for task_id in ids:
                require_task(data.datas, task_id)

            for task_id in ids:
                loc = locate_task(data.datas, task_id)
                if loc is None:
                    continue
                container, idx = loc
                del container[idx]

            self._storage.save(data)
        logger.debug("Tasks deleted ids=%s", ids)

    def move(self, ids: Iterable[int], new_parent_id: int) -> None:
        """
        Re-parent each task (with its subtree) under `new_parent_id`.

        One load and one save: the relocation is atomic on disk. A task cannot
        be moved under itself or under one of its own descendants.
        """
        ids = list(ids)
        if not ids:
            return

        with self._lock:
            data = self._storage.load()
            parent = require_task(data.datas, new_parent_id)

            for task_id in ids:
                task = require_task(data.datas, task_id)
                if any(t.id == new_parent_id for t in task.walk()):
                    raise InvalidMoveError(task_id, new_parent_id)

                loc = locate_task(data.datas, task_id)
                if loc is None:
                    raise TaskNotFoundError(task_id)
                container, idx = loc
                moved = container.pop(idx)

                if parent.subtasks is None:
                    parent.subtasks = []
                parent.subtasks.append(moved)

            self._storage.save(data)
        logger.debug("Tasks moved ids=%s new_parent=%s", ids, new_parent_id)

    # ---- internals ----

    @staticmethod
    def _apply_updates(data: StorageFile, ids: list[int], updates: dict[str, Any], cascade: bool) -> None:
        state = updates.get("state")
        for task_id in ids:
            task = require_task(data.datas, task_id)
            if state is not None and not has_state(state, data.states):
                raise UnknownStateError(task_id, state)

            targets = task.walk() if cascade else (task,)
            for target in targets:
                for key, value in updates.items():
                    setattr(target, key, value)
                    if value is None:
                        target.null_keys.discard(key)
