# src/tasktree/tasks/task_models.py

"""
In-memory model of the per-user tasks.json document.

Optional fields use None for "key absent in the file" so that a load/save
cycle reproduces exactly the keys that were read. Unknown keys are kept in
`extra` and written back after the known ones.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

_TASK_KEYS = ("id", "name", "description", "state", "timestamp", "priority", "subtasks")


@dataclass(slots=True)
class TaskState:
    name: str
    hex_color: str
    icon: str
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TaskState:
        if not isinstance(raw, dict):
            raise ValueError(f"state entry must be an object, got {type(raw).__name__}")
        extra = {k: v for k, v in raw.items() if k not in ("name", "hexColor", "icon")}
        return cls(
            name=str(raw.get("name", "")),
            hex_color=str(raw.get("hexColor", "")),
            icon=str(raw.get("icon", "")),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "hexColor": self.hex_color, "icon": self.icon}
        out.update(self.extra)
        return out


DEFAULT_TASK_STATES: tuple[TaskState, ...] = (
    TaskState(name="todo", hex_color="#ff8f00", icon="☐"),
    TaskState(name="currently_doing", hex_color="#ab47bc", icon="✹"),
    TaskState(name="done", hex_color="#66bb6a", icon="✔"),
)


@dataclass(slots=True)
class Task:
    id: int | None = None
    name: str | None = None
    description: str | None = None
    state: str | None = None
    timestamp: str | None = None
    priority: int | None = None
    subtasks: list[Task] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    # Known keys the file stores as an explicit null (None alone means "absent").
    null_keys: set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """Build a task tree from its JSON object; non-object entries raise ValueError."""
        if not isinstance(raw, dict):
            raise ValueError(f"task entry must be an object, got {type(raw).__name__}")
        subtasks_raw = raw.get("subtasks")
        subtasks: list[Task] | None = None
        if isinstance(subtasks_raw, list):
            subtasks = [cls.from_dict(s) for s in subtasks_raw]
        elif subtasks_raw is not None:
            raise ValueError("subtasks must be a list")

        return cls(
            id=raw.get("id"),
            name=raw.get("name"),
            description=raw.get("description"),
            state=raw.get("state"),
            timestamp=raw.get("timestamp"),
            priority=raw.get("priority"),
            subtasks=subtasks,
            extra={k: copy.deepcopy(v) for k, v in raw.items() if k not in _TASK_KEYS},
            null_keys={k for k in _TASK_KEYS if k in raw and raw[k] is None},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key in _TASK_KEYS:
            value = getattr(self, key)
            if value is None:
                if key in self.null_keys:
                    out[key] = None
            elif key == "subtasks":
                out[key] = [s.to_dict() for s in value]
            else:
                out[key] = value
        out.update(self.extra)
        return out

    def children(self) -> list[Task]:
        return self.subtasks or []

    def walk(self):
        """Pre-order iteration over this task and all of its descendants."""
        yield self
        for sub in self.children():
            yield from sub.walk()


@dataclass(slots=True)
class StorageFile:
    states: list[TaskState]
    datas: list[Task]
    meta_extra: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls) -> StorageFile:
        return cls(states=[TaskState(s.name, s.hex_color, s.icon) for s in DEFAULT_TASK_STATES], datas=[])

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StorageFile:
        meta = raw["meta"]
        return cls(
            states=[TaskState.from_dict(s) for s in meta["states"]],
            datas=[Task.from_dict(t) for t in raw["datas"]],
            meta_extra={k: copy.deepcopy(v) for k, v in meta.items() if k != "states"},
            extra={k: copy.deepcopy(v) for k, v in raw.items() if k not in ("meta", "datas")},
        )

    def to_dict(self) -> dict[str, Any]:
        meta: dict[str, Any] = {"states": [s.to_dict() for s in self.states]}
        meta.update(self.meta_extra)
        out: dict[str, Any] = {"meta": meta, "datas": [t.to_dict() for t in self.datas]}
        out.update(self.extra)
        return out

    def walk(self):
        for task in self.datas:
            yield from task.walk()


@dataclass(slots=True)
class SearchResult:
    task: Task
    path: list[int]
    matches: list[str]
