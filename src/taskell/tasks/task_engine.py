# src/taskell/tasks/task_engine.py

"""
Task state machine.

Every function here is pure: it takes a TaskStore snapshot and returns a Result
carrying a new snapshot (or an error). Inputs are never mutated, and nothing
here touches the filesystem.

Legal transitions:

    zatsu  --set_criteria--> ready
    ready  --start-->        active
    paused --start/resume--> active
    active --pause-->        paused
    active --complete-->     done
    *      --drop-->         dropped   (except from done)
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import UTC, datetime

from .task_models import ErrorKind, Note, Result, Task, TaskStatus, TaskStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def _aware(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC, same as the JSON codec does.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _now(now: datetime | None) -> datetime:
    return _aware(now) if now is not None else utcnow()


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between start and end, rounded half-up, never negative."""
    start, end = _aware(start), _aware(end)
    minutes = (end - start).total_seconds() / 60.0
    return max(0, int(math.floor(minutes + 0.5)))


def create_empty_store() -> TaskStore:
    return TaskStore(tasks=(), next_id=1, active_task_id=None)


# ---- helpers ----


def _not_found(task_id: int) -> Result:
    return Result.failure(ErrorKind.NOT_FOUND, f"Task {task_id} not found")


def _illegal(message: str) -> Result:
    return Result.failure(ErrorKind.ILLEGAL_TRANSITION, message)


def _with_task(store: TaskStore, task: Task, *, active_task_id: int | None) -> TaskStore:
    tasks = tuple(task if t.id == task.id else t for t in store.tasks)
    return TaskStore(tasks=tasks, next_id=store.next_id, active_task_id=active_task_id)


def _end_session(task: Task, now: datetime) -> Task:
    """Close a running session: bank its elapsed time and clear session_start."""
    if task.session_start is None:
        return task
    spent = elapsed_minutes(task.session_start, now)
    return replace(task, time_spent=task.time_spent + spent, session_start=None)


def _clean(text: str | None) -> str:
    return (text or "").strip()


# ---- transitions ----


def add_task(store: TaskStore, content: str, *, now: datetime | None = None) -> Result:
    content = _clean(content)
    if not content:
        return Result.failure(ErrorKind.VALIDATION, "Task content is required")

    now = _now(now)
    task = Task(
        id=store.next_id,
        content=content,
        status=TaskStatus.ZATSU,
        created_at=now,
        updated_at=now,
    )
    new_store = TaskStore(
        tasks=(*store.tasks, task),
        next_id=store.next_id + 1,
        active_task_id=store.active_task_id,
    )
    logger.debug("Task added id=%s", task.id)
    return Result.success(
        f'Added task {task.id}: "{task.content}" (zatsu)', store=new_store, task=task
    )


def set_criteria(
    store: TaskStore, task_id: int, text: str, *, now: datetime | None = None
) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    text = _clean(text)
    if not text:
        return Result.failure(ErrorKind.VALIDATION, "Completion criteria text is required")

    if task.status != TaskStatus.ZATSU:
        return _illegal(
            f"Cannot set criteria for task {task_id} in {task.status} state "
            "(only zatsu tasks take criteria)"
        )

    updated = replace(task, delta=text, status=TaskStatus.READY, updated_at=_now(now))
    return Result.success(
        f'Task {task_id} is ready with criteria: "{text}"',
        store=_with_task(store, updated, active_task_id=store.active_task_id),
        task=updated,
    )


def _activate(
    store: TaskStore,
    task_id: int,
    *,
    allowed: tuple[TaskStatus, ...],
    verb: str,
    done_label: str,
    now: datetime | None,
) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    if task.status not in allowed:
        names = "/".join(str(s) for s in allowed)
        return _illegal(f"Cannot {verb} task {task_id} in {task.status} state (needs {names})")

    if not _clean(task.delta):
        return _illegal(f"Task {task_id} has no completion criteria; set them first")

    if store.active_task_id is not None:
        return _illegal(
            f"Task {store.active_task_id} is already active; pause or finish it first"
        )

    now = _now(now)
    updated = replace(task, status=TaskStatus.ACTIVE, session_start=now, updated_at=now)
    logger.debug("Task %s -> active (%s)", task_id, verb)
    return Result.success(
        f'{done_label} task {task_id}: "{task.content}"',
        store=_with_task(store, updated, active_task_id=task_id),
        task=updated,
    )


def start_task(store: TaskStore, task_id: int, *, now: datetime | None = None) -> Result:
    return _activate(
        store,
        task_id,
        allowed=(TaskStatus.READY, TaskStatus.PAUSED),
        verb="start",
        done_label="Started",
        now=now,
    )


def resume_task(store: TaskStore, task_id: int, *, now: datetime | None = None) -> Result:
    return _activate(
        store,
        task_id,
        allowed=(TaskStatus.PAUSED,),
        verb="resume",
        done_label="Resumed",
        now=now,
    )


def pause_task(store: TaskStore, task_id: int, *, now: datetime | None = None) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    if task.status != TaskStatus.ACTIVE:
        return _illegal(f"Cannot pause task {task_id} in {task.status} state (needs active)")

    now = _now(now)
    updated = replace(_end_session(task, now), status=TaskStatus.PAUSED, updated_at=now)
    return Result.success(
        f'Paused task {task_id}: "{task.content}" ({updated.time_spent}m total)',
        store=_with_task(store, updated, active_task_id=None),
        task=updated,
    )


def complete_task(
    store: TaskStore,
    task_id: int,
    final_state: str | None = None,
    *,
    now: datetime | None = None,
) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    if task.status != TaskStatus.ACTIVE:
        return _illegal(f"Cannot complete task {task_id} in {task.status} state (needs active)")

    now = _now(now)
    final_state = _clean(final_state) or None
    updated = replace(
        _end_session(task, now),
        status=TaskStatus.DONE,
        final_state=final_state,
        completed_at=now,
        updated_at=now,
    )

    message = f'Completed task {task_id}: "{task.content}"'
    if final_state:
        message += f" -> {final_state}"
    return Result.success(
        message,
        store=_with_task(store, updated, active_task_id=None),
        task=updated,
    )


def drop_task(store: TaskStore, task_id: int, *, now: datetime | None = None) -> Result:
    """
    Abandon a task. Dropping an already dropped task succeeds without changes.
    """
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    if task.status == TaskStatus.DROPPED:
        return Result.success(f"Task {task_id} is already dropped", store=store, task=task)

    if task.status == TaskStatus.DONE:
        return _illegal(f"Cannot drop task {task_id}: it is already done")

    now = _now(now)
    updated = replace(_end_session(task, now), status=TaskStatus.DROPPED, updated_at=now)
    active_task_id = None if store.active_task_id == task_id else store.active_task_id
    return Result.success(
        f'Dropped task {task_id}: "{task.content}"',
        store=_with_task(store, updated, active_task_id=active_task_id),
        task=updated,
    )


def add_note(
    store: TaskStore, task_id: int, text: str, *, now: datetime | None = None
) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    text = _clean(text)
    if not text:
        return Result.failure(ErrorKind.VALIDATION, "Note text is required")

    now = _now(now)
    updated = replace(task, notes=(*task.notes, Note(timestamp=now, content=text)), updated_at=now)
    return Result.success(
        f"Added note to task {task_id}",
        store=_with_task(store, updated, active_task_id=store.active_task_id),
        task=updated,
    )


def edit_task(
    store: TaskStore, task_id: int, content: str, *, now: datetime | None = None
) -> Result:
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    content = _clean(content)
    if not content:
        return Result.failure(ErrorKind.VALIDATION, "Task content is required")

    if task.status.is_terminal:
        return _illegal(f"Cannot edit task {task_id}: it is {task.status}")

    updated = replace(task, content=content, updated_at=_now(now))
    return Result.success(
        f'Task {task_id} renamed to "{content}"',
        store=_with_task(store, updated, active_task_id=store.active_task_id),
        task=updated,
    )


def delete_task(store: TaskStore, task_id: int) -> Result:
    """Remove a task for good. next_id is left alone so ids are never reused."""
    task = store.get(task_id)
    if task is None:
        return _not_found(task_id)

    new_store = TaskStore(
        tasks=tuple(t for t in store.tasks if t.id != task_id),
        next_id=store.next_id,
        active_task_id=None if store.active_task_id == task_id else store.active_task_id,
    )
    logger.debug("Task deleted id=%s", task_id)
    return Result.success(f'Deleted task {task_id}: "{task.content}"', store=new_store, task=task)
