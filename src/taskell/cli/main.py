# src/taskell/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs one command and exits (taskell start 3), or
- starts the console REPL when no command is given.

Exit codes: 0 success, 1 failed command or storage error, 2 unknown command.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry as command_registry
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskell",
        description="Task state tracker: zatsu -> ready -> active -> done.",
        epilog="Run without a command for interactive mode. 'taskell help' lists commands.",
    )
    parser.add_argument("--store", help="Path to the task store JSON (env: TASKELL_STORE_PATH)")
    parser.add_argument("--log-level", help="Console log level (env: TASKELL_LOG_LEVEL)")
    parser.add_argument("command", nargs="?", help="Command to run once (omit for the REPL)")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    return parser


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)

    settings = get_settings().with_overrides(store_path=ns.store, log_level=ns.log_level)

    console_level = getattr(logging, settings.log_level, logging.WARNING)
    setup_logging(
        log_dir=settings.data_dir,
        console_level=console_level,
        log_to_file=settings.log_to_file,
    )

    try:
        state = create_initial_state(settings=settings)
    except OSError as e:
        print(f"Storage error: {e}", file=sys.stderr)
        return EXIT_FAILED

    if not ns.command:
        run_console_loop(state)
        return EXIT_OK

    if not command_registry.is_known(ns.command):
        print(f"Unknown command: {ns.command}. Type 'taskell help' for usage.", file=sys.stderr)
        return EXIT_USAGE

    reply = command_registry.dispatch(state, ns.command, list(ns.args))
    if reply.ok:
        print(reply.text)
        return EXIT_OK

    print(f"Error: {reply.text}", file=sys.stderr)
    logger.debug("Command %s failed: %s", ns.command, reply.text)
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
