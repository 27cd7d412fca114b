# src/tasktree/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import handle_pending
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str, user_id: str) -> str:
    """Route one input line: slash command, pending flow answer, or a hint."""
    reply = command_registry.handle(state, line, user_id)
    if reply is not None:
        return reply

    reply = handle_pending(state, line, user_id)
    if reply is not None:
        return reply

    return "Not a command. Use /help to list available commands."


def run_console_loop(state: AppState, *, user_id: str) -> None:
    logger.info("Console connector started (user=%s).", user_id)
    _print_ts("[CONSOLE] Manage your tasks. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = handle_line(state, user_input, user_id)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        _print_ts(reply)

    logger.info("Console connector finished.")
