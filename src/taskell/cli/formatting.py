# src/taskell/cli/formatting.py

from __future__ import annotations

from datetime import datetime

from ..tasks.task_engine import elapsed_minutes, utcnow
from ..tasks.task_models import Task, TaskStatus, TaskStore
from ..tasks.task_queries import active_task, ready_tasks, status_counts

STATUS_ICONS: dict[TaskStatus, str] = {
    TaskStatus.ZATSU: "💭",
    TaskStatus.READY: "🎯",
    TaskStatus.ACTIVE: "⚡",
    TaskStatus.PAUSED: "⏸️",
    TaskStatus.DONE: "✅",
    TaskStatus.DROPPED: "❌",
}


def _ts_local(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def format_task(task: Task, *, show_details: bool = False) -> str:
    time_str = f" ({task.time_spent}m)" if task.time_spent > 0 else ""
    line = f"{STATUS_ICONS[task.status]} [{task.id}] {task.content}{time_str}"
    if not show_details:
        return line

    lines = [line, f"    Status: {task.status}"]
    if task.delta:
        lines.append(f"    Criteria: {task.delta}")
    if task.final_state:
        lines.append(f"    Final: {task.final_state}")
    lines.append(f"    Created: {_ts_local(task.created_at)}")
    if task.completed_at:
        lines.append(f"    Completed: {_ts_local(task.completed_at)}")
    if task.notes:
        lines.append("    Notes:")
        for note in task.notes:
            lines.append(f"      {_ts_local(note.timestamp)}: {note.content}")
    return "\n".join(lines)


def format_task_list(tasks: list[Task], title: str | None = None) -> str:
    if not tasks:
        return f"{title}\n  (none)" if title else "(no tasks)"
    body = "\n".join(f"  {format_task(t)}" for t in tasks)
    return f"{title}\n{body}" if title else body


def format_status(store: TaskStore, *, now: datetime | None = None) -> str:
    """Short summary: what is running, what can be started, and the counts."""
    counts = status_counts(store)
    pending = counts[TaskStatus.ZATSU] + counts[TaskStatus.READY] + counts[TaskStatus.PAUSED]
    summary = (
        f"Tasks: {pending} pending | {counts[TaskStatus.ACTIVE]} active | "
        f"{counts[TaskStatus.DONE]} done | {counts[TaskStatus.DROPPED]} dropped"
    )

    current = active_task(store)
    if current is not None and current.session_start is not None:
        elapsed = elapsed_minutes(current.session_start, now or utcnow())
        head = f"Current: {format_task(current)} - working for {elapsed}m"
        if current.delta:
            head += f"\n    Goal: {current.delta}"
        return f"{head}\n{summary}"

    ready = ready_tasks(store)
    if ready:
        first = ready[0]
        return f"Ready: {len(ready)} task(s) - 'start' picks [{first.id}] {first.content}\n{summary}"

    return f"No active task - type 'help' for commands\n{summary}"
