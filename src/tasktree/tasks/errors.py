# src/tasktree/tasks/errors.py

"""Errors raised by the task storage and tree layers."""

from __future__ import annotations

from pathlib import Path


class TaskError(Exception):
    """Base class for every error the task core surfaces to callers."""


class TaskNotFoundError(TaskError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with id {task_id} not found")
        self.task_id = task_id


class UnknownStateError(TaskError):
    def __init__(self, task_id: int | None, state: str) -> None:
        where = f" for task {task_id}" if task_id is not None else ""
        super().__init__(f'Unknown state "{state}"{where}')
        self.task_id = task_id
        self.state = state


class NoFurtherStateError(TaskError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} is already in final state")
        self.task_id = task_id


class DuplicateIdError(TaskError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task ID {task_id} already exists")
        self.task_id = task_id


class InvalidMoveError(TaskError):
    def __init__(self, task_id: int, parent_id: int) -> None:
        super().__init__(f"Cannot move task {task_id} under {parent_id}: it is the task itself or one of its subtasks")
        self.task_id = task_id
        self.parent_id = parent_id


class CorruptStorageError(TaskError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid tasks file {path}: {reason}")
        self.path = path
        self.reason = reason


class StorageIOError(TaskError):
    def __init__(self, path: Path, op: str, detail: str = "") -> None:
        msg = f"Failed to {op} {path}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.path = path
        self.op = op
