# tests/test_commands.py

from __future__ import annotations

from tasktree.cli.commands import CommandRegistry
from tasktree.connectors.console_connector import handle_line
from tasktree.tasks.task_api import export_tasks_file, open_task_manager


def test_command_registry_routes_and_reports_errors(state) -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    def ha(state, args, user_id):
        called["a"] += 1
        return f"a:{user_id}:{','.join(args)}"

    def hb(state, args, user_id):
        raise ValueError("bad input")

    reg.register("a", ha, "a", aliases=["aa"])
    reg.register("b", hb, "b")

    assert reg.handle(state, "/a x y", user_id="u") == "a:u:x,y"
    assert reg.handle(state, "/AA", user_id="u") == "a:u:"
    assert reg.handle(state, "/b", user_id="u") == "Error: bad input"
    assert called["a"] == 2


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello", user_id="u") is None
    assert "Unknown command" in (reg.handle(state, "/nope", user_id="u") or "")


def test_add_list_next_flow(state) -> None:
    assert handle_line(state, "/add Write report", "u1") == "Added [0] Write report."
    assert handle_line(state, "/sub 0 Outline", "u1") == "Added [1] Outline under [0]."

    listing = handle_line(state, "/list", "u1")
    assert "[0] Write report" in listing
    assert "  ☐ [1] Outline" in listing

    handle_line(state, "/next 0 -r", "u1")
    manager = open_task_manager(state, "u1")
    assert manager.get(1).state == "currently_doing"

    assert handle_line(state, "/done 0", "u1") == "Completed 0."
    assert "already in final state" in handle_line(state, "/next 0", "u1")


def test_multi_step_add_uses_session(state) -> None:
    assert "Send the name" in handle_line(state, "/add", "u1")
    assert handle_line(state, "Buy milk", "u1") == "Added [0] Buy milk."
    # Session consumed: plain text is no longer an answer.
    assert "Not a command" in handle_line(state, "Buy bread", "u1")


def test_sessions_do_not_leak_between_users(state) -> None:
    handle_line(state, "/add", "u1")
    assert "Not a command" in handle_line(state, "hello", "u2")
    assert handle_line(state, "From u1", "u1") == "Added [0] From u1."
    assert open_task_manager(state, "u2").get_all() == []


def test_hide_completed_filters_list(state) -> None:
    handle_line(state, "/add open", "u1")
    handle_line(state, "/add finished", "u1")
    handle_line(state, "/done 1", "u1")

    assert "finished" in handle_line(state, "/list", "u1")
    assert handle_line(state, "/hide", "u1") == "Completed tasks are now hidden."
    listing = handle_line(state, "/list", "u1")
    assert "open" in listing
    assert "finished" not in listing


def test_errors_are_reported_not_raised(state) -> None:
    assert handle_line(state, "/show 5", "u1") == "Error: Task with id 5 not found"
    assert handle_line(state, "/del x", "u1").startswith("Error: id must be an integer")
    handle_line(state, "/add a", "u1")
    assert "Unknown state" in handle_line(state, "/state 0 blocked", "u1")


def test_search_stats_and_export(state) -> None:
    handle_line(state, "/add Sync wallet", "u1")
    handle_line(state, "/add Sync tasks.json", "u1")

    found = handle_line(state, "/search sync", "u1")
    assert "Found 2 task(s)" in found

    stats = handle_line(state, "/stats", "u1")
    assert "Total tasks: 2" in stats
    assert "todo: 2" in stats

    path, filename = export_tasks_file(state, "u1")
    assert path.name == "tasks.json"
    assert filename.startswith("tasks_") and filename.endswith(".json")


def test_backups_and_restore(state) -> None:
    handle_line(state, "/add first", "u1")
    handle_line(state, "/rename 0 second", "u1")

    listing = handle_line(state, "/backups", "u1").splitlines()
    newest = listing[1].strip()
    assert handle_line(state, f"/restore {newest}", "u1") == f"Restored {newest}."
    assert open_task_manager(state, "u1").get(0).name == "first"
