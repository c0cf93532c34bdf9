# src/taskell/tasks/task_queries.py

"""
Read-only projections over a TaskStore.

Ordering:
- ready/paused/pending/completed lists keep creation order (ascending id),
  so "first ready task" is always the oldest one.
- list_tasks() is the display listing: most recently updated first.
"""

from __future__ import annotations

from .task_models import PENDING_STATUSES, ErrorKind, Result, Task, TaskStatus, TaskStore

LIST_FILTERS: tuple[str, ...] = ("pending", "all", *(s.value for s in TaskStatus))


def _by_status(store: TaskStore, *statuses: TaskStatus) -> list[Task]:
    wanted = set(statuses)
    return sorted((t for t in store.tasks if t.status in wanted), key=lambda t: t.id)


def active_task(store: TaskStore) -> Task | None:
    if store.active_task_id is None:
        return None
    return store.get(store.active_task_id)


def ready_tasks(store: TaskStore) -> list[Task]:
    return _by_status(store, TaskStatus.READY)


def paused_tasks(store: TaskStore) -> list[Task]:
    return _by_status(store, TaskStatus.PAUSED)


def pending_tasks(store: TaskStore) -> list[Task]:
    return _by_status(store, *PENDING_STATUSES)


def completed_tasks(store: TaskStore) -> list[Task]:
    return _by_status(store, TaskStatus.DONE)


def find_task(store: TaskStore, task_id: int) -> Task | None:
    return store.get(task_id)


def list_tasks(store: TaskStore, status_filter: str | None = None) -> list[Task]:
    """
    Tasks for display, most recently updated first (ties broken by id).

    status_filter: a status name, "pending", "all" or None (same as "all").
    """
    key = (status_filter or "all").strip().lower()
    if key not in LIST_FILTERS:
        raise ValueError(f"Unknown filter {status_filter!r}; use one of: {', '.join(LIST_FILTERS)}")

    if key == "all":
        tasks = list(store.tasks)
    elif key == "pending":
        tasks = pending_tasks(store)
    else:
        tasks = _by_status(store, TaskStatus(key))

    tasks.sort(key=lambda t: t.id)
    tasks.sort(key=lambda t: t.updated_at, reverse=True)
    return tasks


def status_counts(store: TaskStore) -> dict[TaskStatus, int]:
    counts = {status: 0 for status in TaskStatus}
    for task in store.tasks:
        counts[task.status] += 1
    return counts


def resolve_task(store: TaskStore, identifier: str | int) -> Result:
    """
    Resolve a user-supplied identifier to exactly one task.

    - an int (or a string of digits) is an exact id lookup
    - anything else is a case-insensitive substring of the task content;
      several matches is an "ambiguous" failure instead of a guess
    """
    if isinstance(identifier, int):
        task_id: int | None = identifier
    else:
        raw = str(identifier).strip()
        if not raw:
            return Result.failure(ErrorKind.VALIDATION, "Task id or text is required")
        task_id = int(raw) if raw.isdecimal() else None

    if task_id is not None:
        task = store.get(task_id)
        if task is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Task {task_id} not found")
        return Result.success(f"Task {task_id}", task=task)

    needle = str(identifier).strip().lower()
    matches = [t for t in store.tasks if needle in t.content.lower()]

    if not matches:
        return Result.failure(ErrorKind.NOT_FOUND, f'No task matches "{identifier}"')

    if len(matches) > 1:
        ids = ", ".join(str(t.id) for t in matches)
        return Result.failure(
            ErrorKind.AMBIGUOUS, f'"{identifier}" matches several tasks ({ids}); use an id'
        )

    task = matches[0]
    return Result.success(f"Task {task.id}", task=task)
