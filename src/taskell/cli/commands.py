# src/taskell/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.state import AppState
from ..tasks import task_engine as engine
from ..tasks.task_models import ErrorKind, Result, Task, TaskStore
from ..tasks.task_queries import (
    LIST_FILTERS,
    active_task,
    list_tasks,
    paused_tasks,
    ready_tasks,
    resolve_task,
)
from ..tasks.task_store import StoreError
from .formatting import format_status, format_task, format_task_list

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Reply:
    text: str
    ok: bool = True


CommandHandler = Callable[[AppState, list[str]], Reply]


class CommandRegistry:
    """Command registry shared by the one-shot CLI and the console REPL."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, tuple[str, str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        usage: str | None = None,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = (usage or key, help_text)
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def is_known(self, name: str) -> bool:
        return name.lower() in self._handlers

    def dispatch(self, state: AppState, name: str, args: list[str]) -> Reply:
        handler = self._handlers.get(name.lower())
        if not handler:
            return Reply(f"Unknown command: {name}. Type 'help' for usage.", ok=False)

        try:
            return handler(state, args)
        except StoreError as e:
            logger.error("Store error in %s: %s", name, e)
            return Reply(f"Storage error: {e}", ok=False)

    def handle(self, state: AppState, line: str) -> Reply | None:
        """
        Handle a line like "start 3".
        Returns None for an empty line.
        """
        parts = line.split()
        if not parts:
            return None
        return self.dispatch(state, parts[0], parts[1:])

    def build_help(self) -> str:
        width = max((len(usage) for usage, _ in self._help.values()), default=0)
        lines = ["Taskell commands:"]
        for usage, help_text in self._help.values():
            lines.append(f"  {usage.ljust(width)}  {help_text}")
        lines.append("  quit".ljust(width + 2) + "  Leave the interactive mode")
        lines.append("")
        lines.append("Without an id, start/pause/done/note/drop act on the obvious task.")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _reply(result: Result) -> Reply:
    return Reply(result.message, ok=result.ok)


def _pick(
    store: TaskStore,
    identifier: str | None,
    default: Callable[[TaskStore], Task | None],
    missing: str,
) -> Result:
    """Resolve an explicit identifier, or fall back to the smart default."""
    if identifier:
        return resolve_task(store, identifier)
    task = default(store)
    if task is None:
        return Result.failure(ErrorKind.NOT_FOUND, missing)
    return Result.success(f"Task {task.id}", task=task)


def _first(tasks: list[Task]) -> Task | None:
    return tasks[0] if tasks else None


def _targeted(
    state: AppState,
    args: list[str],
    transition: Callable[[TaskStore, int], Result],
    default: Callable[[TaskStore], Task | None],
    missing: str,
) -> Reply:
    identifier = " ".join(args).strip() or None

    def op(store: TaskStore) -> Result:
        found = _pick(store, identifier, default, missing)
        if not found.ok or found.task is None:
            return found
        return transition(store, found.task.id)

    return _reply(state.repo.transact(op))


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> Reply:
    return Reply(registry.build_help())


def cmd_add(state: AppState, args: list[str]) -> Reply:
    if not args:
        return Reply("Usage: add <content>", ok=False)
    content = " ".join(args)
    return _reply(state.repo.transact(lambda store: engine.add_task(store, content)))


def cmd_delta(state: AppState, args: list[str]) -> Reply:
    if len(args) < 2:
        return Reply("Usage: delta <id> <criteria>", ok=False)
    identifier, text = args[0], " ".join(args[1:])

    def op(store: TaskStore) -> Result:
        found = resolve_task(store, identifier)
        if not found.ok or found.task is None:
            return found
        return engine.set_criteria(store, found.task.id, text)

    return _reply(state.repo.transact(op))


def _split_timebox(args: list[str]) -> tuple[list[str], int | None] | None:
    """Pull a "-t <minutes>" option out of args; None when it is malformed."""
    if "-t" not in args:
        return args, None
    i = args.index("-t")
    if i + 1 >= len(args) or not args[i + 1].isdecimal() or int(args[i + 1]) <= 0:
        return None
    return args[:i] + args[i + 2 :], int(args[i + 1])


def cmd_start(state: AppState, args: list[str]) -> Reply:
    """start [id] [-t minutes] -> activate a task; the timebox is only echoed back."""
    parsed = _split_timebox(args)
    if parsed is None:
        return Reply("Usage: start [id] [-t minutes]", ok=False)
    rest, timebox = parsed

    reply = _targeted(
        state,
        rest,
        engine.start_task,
        lambda store: _first(ready_tasks(store)),
        "No ready tasks to start",
    )
    if reply.ok and timebox is not None:
        return Reply(f"{reply.text} ({timebox} min timebox)")
    return reply


def cmd_resume(state: AppState, args: list[str]) -> Reply:
    return _targeted(
        state,
        args,
        engine.resume_task,
        lambda store: _first(paused_tasks(store)),
        "No paused tasks to resume",
    )


def cmd_pause(state: AppState, args: list[str]) -> Reply:
    return _targeted(state, args, engine.pause_task, active_task, "No active task to pause")


def cmd_done(state: AppState, args: list[str]) -> Reply:
    """done [finalState] -> complete the active task."""
    final_state = " ".join(args).strip() or None

    def op(store: TaskStore) -> Result:
        task = active_task(store)
        if task is None:
            return Result.failure(ErrorKind.NOT_FOUND, "No active task to complete")
        return engine.complete_task(store, task.id, final_state)

    return _reply(state.repo.transact(op))


def cmd_drop(state: AppState, args: list[str]) -> Reply:
    return _targeted(state, args, engine.drop_task, active_task, "No active task to drop")


def cmd_note(state: AppState, args: list[str]) -> Reply:
    """
    note <text>       -> note on the active task
    note <id> <text>  -> note on a specific task
    """
    if not args:
        return Reply("Usage: note <content> or note <id> <content>", ok=False)

    def op(store: TaskStore) -> Result:
        current = active_task(store)
        leading_id = int(args[0]) if args[0].isdecimal() else None

        # "note 3 cups of coffee" stays on the active task unless task 3 exists.
        if leading_id is not None and len(args) > 1 and store.get(leading_id) is not None:
            task_id, text = leading_id, " ".join(args[1:])
        elif current is not None:
            task_id, text = current.id, " ".join(args)
        elif leading_id is not None:
            task_id, text = leading_id, " ".join(args[1:])
        else:
            return Result.failure(
                ErrorKind.NOT_FOUND, "No active task; use: note <id> <content>"
            )
        return engine.add_note(store, task_id, text)

    return _reply(state.repo.transact(op))


def cmd_edit(state: AppState, args: list[str]) -> Reply:
    if len(args) < 2:
        return Reply("Usage: edit <id> <content>", ok=False)
    identifier, content = args[0], " ".join(args[1:])

    def op(store: TaskStore) -> Result:
        found = resolve_task(store, identifier)
        if not found.ok or found.task is None:
            return found
        return engine.edit_task(store, found.task.id, content)

    return _reply(state.repo.transact(op))


def cmd_rm(state: AppState, args: list[str]) -> Reply:
    if not args:
        return Reply("Usage: rm <id>", ok=False)
    identifier = " ".join(args)

    def op(store: TaskStore) -> Result:
        found = resolve_task(store, identifier)
        if not found.ok or found.task is None:
            return found
        return engine.delete_task(store, found.task.id)

    return _reply(state.repo.transact(op))


def cmd_list(state: AppState, args: list[str]) -> Reply:
    status_filter = args[0].lower() if args else "pending"
    if status_filter not in LIST_FILTERS:
        choices = ", ".join(LIST_FILTERS)
        return Reply(f"Unknown filter: {status_filter}. Use one of: {choices}", ok=False)
    tasks = list_tasks(state.repo.load(), status_filter)
    return Reply(format_task_list(tasks, f"Tasks ({status_filter}):"))


def cmd_show(state: AppState, args: list[str]) -> Reply:
    if not args:
        return Reply("Usage: show <id>", ok=False)
    found = resolve_task(state.repo.load(), " ".join(args))
    if not found.ok or found.task is None:
        return _reply(found)
    return Reply(format_task(found.task, show_details=True))


def cmd_status(state: AppState, args: list[str]) -> Reply:
    return Reply(format_status(state.repo.load()))


def cmd_backup(state: AppState, args: list[str]) -> Reply:
    target = state.repo.backup(args[0] if args else None)
    return Reply(f"Backup written to {target}")


def cmd_export(state: AppState, args: list[str]) -> Reply:
    if len(args) != 1:
        return Reply("Usage: export <path>", ok=False)
    target = state.repo.export_to(args[0])
    return Reply(f"Exported tasks to {target}")


def cmd_import(state: AppState, args: list[str]) -> Reply:
    if len(args) != 1:
        return Reply("Usage: import <path>", ok=False)
    store = state.repo.import_from(args[0])
    return Reply(f"Imported {len(store)} tasks from {args[0]}")


registry.register("add", cmd_add, "Add a task (zatsu)", usage="add <content>", aliases=["a"])
registry.register(
    "delta",
    cmd_delta,
    "Set completion criteria (zatsu -> ready)",
    usage="delta <id> <criteria>",
    aliases=["criteria", "d"],
)
registry.register(
    "start",
    cmd_start,
    "Start a task; default: first ready",
    usage="start [id] [-t min]",
    aliases=["s"],
)
registry.register("pause", cmd_pause, "Pause the active task", usage="pause", aliases=["p"])
registry.register(
    "resume",
    cmd_resume,
    "Resume a paused task; default: first paused",
    usage="resume [id]",
    aliases=["r"],
)
registry.register(
    "done", cmd_done, "Complete the active task", usage="done [final state]", aliases=["complete"]
)
registry.register(
    "drop", cmd_drop, "Drop a task; default: the active one", usage="drop [id]", aliases=["x"]
)
registry.register(
    "note",
    cmd_note,
    "Add a note to the active (or given) task",
    usage="note [id] <text>",
    aliases=["n"],
)
registry.register(
    "edit", cmd_edit, "Change a task's content", usage="edit <id> <content>", aliases=["e"]
)
registry.register("rm", cmd_rm, "Delete a task for good", usage="rm <id>", aliases=["delete"])
registry.register(
    "list",
    cmd_list,
    "List tasks (pending/all/<status>)",
    usage="list [filter]",
    aliases=["l", "ls"],
)
registry.register("show", cmd_show, "Show task details and notes", usage="show <id>")
registry.register(
    "status",
    cmd_status,
    "What is active or ready",
    usage="status",
    aliases=["current", "clear", "c"],
)
registry.register(
    "backup", cmd_backup, "Copy the store to a timestamped backup", usage="backup [dir]"
)
registry.register("export", cmd_export, "Write the store to another file", usage="export <path>")
registry.register(
    "import", cmd_import, "Replace the store with a file's content", usage="import <path>"
)
registry.register("help", cmd_help, "Show this help", usage="help", aliases=["h", "?"])
