# src/taskell/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..cli.formatting import format_status
from ..core.state import AppState
from ..tasks.task_store import StoreError

logger = logging.getLogger(__name__)

PROMPT = "taskell> "
QUIT_COMMANDS = frozenset({"quit", "q", "exit"})


def _print_status(state: AppState, emit: Callable[[str], None]) -> None:
    try:
        emit(format_status(state.repo.load()))
    except StoreError as e:
        emit(f"Storage error: {e}")


def run_console_loop(
    state: AppState,
    *,
    input_fn: Callable[[str], str] = input,
    emit: Callable[[str], None] = print,
) -> None:
    """
    Interactive REPL: one load -> transition -> save cycle per line.

    Stops on quit/exit, EOF or Ctrl-C. An empty line reprints the status.
    """
    logger.info("Console connector started (store=%s).", state.repo.path)
    emit("Taskell - type 'help' for commands, 'quit' to exit.")
    _print_status(state, emit)

    while True:
        try:
            line = input_fn(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            emit("")
            break

        if not line:
            _print_status(state, emit)
            continue

        if line.lower() in QUIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            emit("Internal error while handling a command.")
            continue

        if reply is not None:
            emit(reply.text if reply.ok else f"Error: {reply.text}")

    logger.info("Console connector finished.")
