# src/tasktree/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.errors import TaskError
from ..tasks.task_api import export_tasks_file, open_task_manager, open_task_store, open_user_config
from ..tasks.task_manager import DEFAULT_TASK_NAME
from ..tasks.task_models import Task, TaskState
from ..tasks.task_states import find_state, is_final

CommandHandler = Callable[[AppState, list[str], str], str]

logger = logging.getLogger(__name__)

RECURSIVE_FLAGS = ("-r", "--recursive")

ACTION_ADD = "add_task"
ACTION_SEARCH = "search"


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, user_id: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        # A new command abandons whatever multi-step flow was pending.
        state.sessions.clear(user_id)
        try:
            return handler(state, args, user_id)
        except (TaskError, ValueError) as e:
            logger.info("Command /%s failed user=%s: %s", name, user_id, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _parse_int(raw: str, what: str = "id") -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{what} must be an integer, got {raw!r}") from None


def _parse_ids(args: list[str]) -> tuple[list[int], bool]:
    recursive = any(a in RECURSIVE_FLAGS for a in args)
    ids = [_parse_int(a) for a in args if a not in RECURSIVE_FLAGS]
    if not ids:
        raise ValueError("at least one task id is required")
    return ids, recursive


def _icon(state_name: str | None, states: list[TaskState]) -> str:
    found = find_state(state_name or "", states)
    return found.icon if found else "?"


def render_tree(
    tasks: list[Task],
    states: list[TaskState],
    *,
    hide_completed: bool = False,
    depth: int = 0,
) -> list[str]:
    lines: list[str] = []
    for task in tasks:
        if hide_completed and task.state and is_final(task.state, states):
            continue
        prio = f" (p{task.priority})" if task.priority is not None else ""
        lines.append(f"{'  ' * depth}{_icon(task.state, states)} [{task.id}] {task.name or DEFAULT_TASK_NAME}{prio}")
        lines.extend(render_tree(task.children(), states, hide_completed=hide_completed, depth=depth + 1))
    return lines


def _add_task(state: AppState, user_id: str, name: str, parent_id: int | None) -> str:
    manager = open_task_manager(state, user_id)
    task_id = manager.add({"name": name}, parent_id=parent_id)
    where = f" under [{parent_id}]" if parent_id is not None else ""
    return f"Added [{task_id}] {name or DEFAULT_TASK_NAME}{where}."


def _search(state: AppState, user_id: str, query: str) -> str:
    results = open_task_manager(state, user_id).search(query)
    if not results:
        return f"No tasks match {query!r}."
    lines = [f"Found {len(results)} task(s):"]
    for r in results:
        trail = " > ".join(str(i) for i in r.path)
        trail = f" (in {trail})" if trail else ""
        lines.append(f"  [{r.task.id}] {r.task.name or DEFAULT_TASK_NAME}{trail} [{', '.join(r.matches)}]")
    return "\n".join(lines)


def handle_pending(state: AppState, line: str, user_id: str) -> str | None:
    """
    Complete a multi-step flow started by /add, /sub or /search with a
    plain-text line. Returns None when nothing is pending for this user.
    """
    ctx = state.sessions.get(user_id)
    if ctx is None:
        return None
    state.sessions.clear(user_id)

    text = line.strip()
    try:
        if ctx.action == ACTION_ADD:
            return _add_task(state, user_id, text, ctx.data.get("parent_id"))
        if ctx.action == ACTION_SEARCH:
            return _search(state, user_id, text)
    except (TaskError, ValueError) as e:
        return f"Error: {e}"

    logger.warning("Dropping unknown session action=%s user=%s", ctx.action, user_id)
    return None


# ---- commands ----


def cmd_help(state: AppState, args: list[str], user_id: str) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], user_id: str) -> str:
    manager = open_task_manager(state, user_id)
    hide = open_user_config(state, user_id).hide_completed
    tasks = manager.get_all()
    if not tasks:
        return "You don't have any tasks yet. Use /add to create one."
    lines = render_tree(tasks, manager.get_meta(), hide_completed=hide)
    header = "Your tasks (completed hidden):" if hide else "Your tasks:"
    return "\n".join([header, *lines]) if lines else "All tasks are completed."


def cmd_show(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 1:
        return "Usage: /show <id>"
    manager = open_task_manager(state, user_id)
    task = manager.get(_parse_int(args[0]))
    states = manager.get_meta()
    lines = [
        f"{_icon(task.state, states)} [{task.id}] {task.name or DEFAULT_TASK_NAME}",
        f"  State: {task.state}",
        f"  Created: {task.timestamp}",
    ]
    if task.priority is not None:
        lines.append(f"  Priority: {task.priority}")
    if task.description:
        lines.append(f"  Description: {task.description}")
    if task.children():
        lines.append("  Subtasks:")
        lines.extend(render_tree(task.children(), states, depth=2))
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str], user_id: str) -> str:
    if not args:
        state.sessions.start(user_id, ACTION_ADD)
        return "Send the name of the new task."
    return _add_task(state, user_id, " ".join(args), None)


def cmd_sub(state: AppState, args: list[str], user_id: str) -> str:
    if not args:
        return "Usage: /sub <parent_id> [name]"
    parent_id = _parse_int(args[0], "parent id")
    if len(args) == 1:
        open_task_manager(state, user_id).get(parent_id)
        state.sessions.start(user_id, ACTION_ADD, {"parent_id": parent_id})
        return f"Send the name of the new subtask of [{parent_id}]."
    return _add_task(state, user_id, " ".join(args[1:]), parent_id)


def cmd_next(state: AppState, args: list[str], user_id: str) -> str:
    ids, recursive = _parse_ids(args)
    open_task_manager(state, user_id).advance_state(ids, cascade=recursive)
    return f"Advanced {', '.join(map(str, ids))}."


def cmd_done(state: AppState, args: list[str], user_id: str) -> str:
    ids, recursive = _parse_ids(args)
    open_task_manager(state, user_id).complete_state(ids, cascade=recursive)
    return f"Completed {', '.join(map(str, ids))}."


def cmd_state(state: AppState, args: list[str], user_id: str) -> str:
    plain = [a for a in args if a not in RECURSIVE_FLAGS]
    if len(plain) != 2:
        return "Usage: /state <id> <state> [-r]"
    task_id = _parse_int(plain[0])
    open_task_manager(state, user_id).edit([task_id], {"state": plain[1]}, cascade=len(plain) != len(args))
    return f"Task [{task_id}] is now {plain[1]}."


def cmd_rename(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) < 2:
        return "Usage: /rename <id> <name>"
    task_id = _parse_int(args[0])
    open_task_manager(state, user_id).edit([task_id], {"name": " ".join(args[1:])})
    return f"Renamed [{task_id}]."


def cmd_desc(state: AppState, args: list[str], user_id: str) -> str:
    if not args:
        return "Usage: /desc <id> [text]  (no text clears the description)"
    task_id = _parse_int(args[0])
    text = " ".join(args[1:]) or None
    open_task_manager(state, user_id).edit([task_id], {"description": text})
    return f"Description of [{task_id}] {'updated' if text else 'cleared'}."


def cmd_priority(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 2:
        return "Usage: /priority <id> <n>"
    task_id = _parse_int(args[0])
    open_task_manager(state, user_id).edit([task_id], {"priority": _parse_int(args[1], "priority")})
    return f"Priority of [{task_id}] set to {args[1]}."


def cmd_del(state: AppState, args: list[str], user_id: str) -> str:
    ids, _ = _parse_ids(args)
    open_task_manager(state, user_id).delete(ids)
    return f"Deleted {', '.join(map(str, ids))} (with subtasks)."


def cmd_move(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) < 2:
        return "Usage: /move <new_parent_id> <id> [id ...]"
    parent_id = _parse_int(args[0], "parent id")
    ids = [_parse_int(a) for a in args[1:]]
    open_task_manager(state, user_id).move(ids, parent_id)
    return f"Moved {', '.join(map(str, ids))} under [{parent_id}]."


def cmd_search(state: AppState, args: list[str], user_id: str) -> str:
    if not args:
        state.sessions.start(user_id, ACTION_SEARCH)
        return "Send the words to search for."
    return _search(state, user_id, " ".join(args))


def cmd_stats(state: AppState, args: list[str], user_id: str) -> str:
    stats = open_task_manager(state, user_id).stats()
    total = stats.pop("total")
    lines = [f"Total tasks: {total}"]
    lines.extend(f"  {name}: {count}" for name, count in stats.items())
    return "\n".join(lines)


def cmd_hide(state: AppState, args: list[str], user_id: str) -> str:
    hidden = open_user_config(state, user_id).toggle_hide_completed()
    return "Completed tasks are now hidden." if hidden else "Completed tasks are now visible."


def cmd_backups(state: AppState, args: list[str], user_id: str) -> str:
    names = open_task_store(state, user_id).list_backups()
    if not names:
        return "No backups yet."
    return "\n".join(["Backups (newest first):", *(f"  {n}" for n in names)])


def cmd_restore(state: AppState, args: list[str], user_id: str) -> str:
    if len(args) != 1:
        return "Usage: /restore <backup name>  (see /backups)"
    store = open_task_store(state, user_id)
    with state.user_lock(store.user_id):
        store.restore_backup(args[0])
    return f"Restored {args[0]}."


def cmd_export(state: AppState, args: list[str], user_id: str) -> str:
    path, filename = export_tasks_file(state, user_id)
    return f"Your tasks file: {path}\nSuggested download name: {filename}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the task tree.", aliases=["ls"])
registry.register("show", cmd_show, help_text="Task details: /show <id>.")
registry.register("add", cmd_add, help_text="Add a top-level task: /add [name].")
registry.register("sub", cmd_sub, help_text="Add a subtask: /sub <parent_id> [name].")
registry.register("next", cmd_next, help_text="Advance state: /next <id...> [-r].")
registry.register("done", cmd_done, help_text="Jump to the final state: /done <id...> [-r].", aliases=["check"])
registry.register("state", cmd_state, help_text="Set a state directly: /state <id> <state> [-r].")
registry.register("rename", cmd_rename, help_text="Rename: /rename <id> <name>.")
registry.register("desc", cmd_desc, help_text="Set description: /desc <id> [text].")
registry.register("priority", cmd_priority, help_text="Set priority: /priority <id> <n>.")
registry.register("del", cmd_del, help_text="Delete with subtasks: /del <id...>.", aliases=["rm"])
registry.register("move", cmd_move, help_text="Re-parent: /move <parent_id> <id...>.", aliases=["mv"])
registry.register("search", cmd_search, help_text="Search names and descriptions: /search [words].")
registry.register("stats", cmd_stats, help_text="Count tasks per state.")
registry.register("hide", cmd_hide, help_text="Toggle hiding completed tasks in /list.")
registry.register("backups", cmd_backups, help_text="List automatic backups.")
registry.register("restore", cmd_restore, help_text="Restore a backup: /restore <name>.")
registry.register("export", cmd_export, help_text="Show the tasks.json path for download.")
