# src/taskell/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - "zatsu" is a quick capture without completion criteria yet.
    - "done" and "dropped" are terminal.
    """

    ZATSU = "zatsu"
    READY = "ready"
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"
    DROPPED = "dropped"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.DROPPED)

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.ZATSU
        return cls(str(raw).strip().lower())


PENDING_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.ZATSU, TaskStatus.READY, TaskStatus.ACTIVE, TaskStatus.PAUSED}
)


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    ILLEGAL_TRANSITION = "illegal_transition"
    VALIDATION = "validation"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True, slots=True)
class Note:
    timestamp: datetime
    content: str


@dataclass(frozen=True, slots=True)
class Task:
    id: int
    content: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    delta: str | None = None
    final_state: str | None = None
    completed_at: datetime | None = None
    session_start: datetime | None = None

    time_spent: int = 0
    notes: tuple[Note, ...] = ()


@dataclass(frozen=True, slots=True)
class TaskStore:
    """
    Immutable snapshot of every task plus the id counter and the active slot.

    Invariants (checked on construction):
    - task ids are unique and strictly below next_id
    - at most one task is active, and active_task_id points at it (or is None)
    - session_start is set iff the task is active
    - time_spent is never negative
    """

    tasks: tuple[Task, ...] = ()
    next_id: int = 1
    active_task_id: int | None = None

    def __post_init__(self) -> None:
        seen: set[int] = set()
        active_ids: list[int] = []

        for task in self.tasks:
            if task.id in seen:
                raise ValueError(f"duplicate task id {task.id}")
            seen.add(task.id)

            if task.id >= self.next_id:
                raise ValueError(f"next_id {self.next_id} must exceed task id {task.id}")

            if task.time_spent < 0:
                raise ValueError(f"task {task.id} has negative time_spent")

            is_active = task.status == TaskStatus.ACTIVE
            if is_active != (task.session_start is not None):
                raise ValueError(f"task {task.id}: session_start must be set iff status is active")
            if is_active:
                active_ids.append(task.id)

        if len(active_ids) > 1:
            raise ValueError(f"more than one active task: {active_ids}")

        expected = active_ids[0] if active_ids else None
        if self.active_task_id != expected:
            raise ValueError(
                f"active_task_id={self.active_task_id} does not match active task {expected}"
            )

    def get(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def __len__(self) -> int:
        return len(self.tasks)


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of a transition or lookup: either a new snapshot or an error message."""

    ok: bool
    message: str
    store: TaskStore | None = None
    task: Task | None = None
    error: ErrorKind | None = None

    @classmethod
    def success(
        cls, message: str, *, store: TaskStore | None = None, task: Task | None = None
    ) -> Result:
        return cls(ok=True, message=message, store=store, task=task)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> Result:
        return cls(ok=False, message=message, error=kind)
