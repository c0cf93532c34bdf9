# src/taskell/tasks/task_store.py

from __future__ import annotations

import json
import logging
import os
import shutil
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .task_engine import create_empty_store
from .task_models import Note, Result, Task, TaskStatus, TaskStore

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Backing file is unreadable, corrupt or unwritable."""


# ---- codec ----


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _str_to_dt(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    dt = datetime.fromisoformat(str(raw))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "content": task.content,
        "status": task.status.value,
        "delta": task.delta,
        "finalState": task.final_state,
        "createdAt": _dt_to_str(task.created_at),
        "updatedAt": _dt_to_str(task.updated_at),
        "completedAt": _dt_to_str(task.completed_at),
        "sessionStart": _dt_to_str(task.session_start),
        "timeSpent": task.time_spent,
        "notes": [
            {"timestamp": _dt_to_str(n.timestamp), "content": n.content} for n in task.notes
        ],
    }


def store_to_dict(store: TaskStore) -> dict[str, Any]:
    return {
        "tasks": [task_to_dict(t) for t in store.tasks],
        "nextId": store.next_id,
        "activeTaskId": store.active_task_id,
    }


def _note_from_raw(raw: Any, fallback_ts: datetime) -> Note:
    # Older files stored notes as plain "[time] text" strings.
    if isinstance(raw, str):
        return Note(timestamp=fallback_ts, content=raw)
    return Note(
        timestamp=_str_to_dt(raw.get("timestamp")) or fallback_ts,
        content=str(raw.get("content", "")),
    )


def task_from_dict(raw: dict[str, Any]) -> Task:
    """
    Build a Task from its JSON form.

    Accepts the older schema too (title/created/updated/startTime, string notes).
    """
    created_at = _str_to_dt(raw.get("createdAt", raw.get("created")))
    updated_at = _str_to_dt(raw.get("updatedAt", raw.get("updated")))
    if created_at is None:
        raise ValueError(f"task {raw.get('id')!r} has no creation timestamp")
    if updated_at is None:
        updated_at = created_at

    status = TaskStatus.from_raw(raw.get("status"))
    session_start = _str_to_dt(raw.get("sessionStart", raw.get("startTime")))

    # Older files left startTime behind on finished tasks, or lost it on active ones.
    if status != TaskStatus.ACTIVE:
        session_start = None
    elif session_start is None:
        session_start = updated_at

    content = raw.get("content", raw.get("title"))
    if content is None:
        raise ValueError(f"task {raw.get('id')!r} has no content")

    return Task(
        id=int(raw["id"]),
        content=str(content),
        status=status,
        created_at=created_at,
        updated_at=updated_at,
        delta=raw.get("delta") or None,
        final_state=raw.get("finalState") or None,
        completed_at=_str_to_dt(raw.get("completedAt")),
        session_start=session_start,
        time_spent=int(raw.get("timeSpent") or 0),
        notes=tuple(_note_from_raw(n, updated_at) for n in raw.get("notes") or []),
    )


def store_from_dict(data: dict[str, Any]) -> TaskStore:
    if not isinstance(data, dict):
        raise ValueError("store document must be a JSON object")

    raw_tasks = data.get("tasks") or []
    if not isinstance(raw_tasks, list):
        raise ValueError("'tasks' must be a list")

    tasks = tuple(task_from_dict(t) for t in raw_tasks)

    max_id = max((t.id for t in tasks), default=0)
    next_id = max(int(data.get("nextId") or 1), max_id + 1)

    # The slot is derived from the tasks; a stale pointer in the file is not trusted.
    active = [t.id for t in tasks if t.status == TaskStatus.ACTIVE]
    if len(active) > 1:
        raise ValueError(f"more than one active task: {active}")

    active_task_id = active[0] if active else None
    stored_slot = data.get("activeTaskId")
    if stored_slot is not None and stored_slot != active_task_id:
        logger.info(
            "Store migration: activeTaskId=%s replaced by %s", stored_slot, active_task_id
        )

    return TaskStore(tasks=tasks, next_id=next_id, active_task_id=active_task_id)


# ---- adapter ----


class JsonTaskStore:
    """
    JSON file task store.

    - load() on a missing file gives an empty store (not an error)
    - save() writes <file>.tmp and os.replace()s it over the target
    - single writer assumed: no locking, no retries
    """

    def __init__(self, path: str | Path = "taskell.json", *, backup_dir: str | Path | None = None):
        self._path = Path(path).expanduser()
        self._backup_dir = Path(backup_dir).expanduser() if backup_dir else None
        logger.debug("JsonTaskStore ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    @staticmethod
    def _read(path: Path) -> TaskStore:
        try:
            raw = path.read_text("utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}") from e
        try:
            return store_from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise StoreError(f"Corrupt task store {path}: {e}") from e

    @staticmethod
    def _write(path: Path, store: TaskStore) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(store_to_dict(store), ensure_ascii=False, indent=2), "utf-8"
            )
            os.replace(tmp, path)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e

    # ---- public API ----

    def load(self) -> TaskStore:
        if not self._path.exists():
            logger.debug("No store at %s; starting empty", self._path)
            return create_empty_store()
        store = self._read(self._path)
        logger.debug("Loaded %d tasks from %s", len(store), self._path)
        return store

    def save(self, store: TaskStore) -> None:
        self._write(self._path, store)
        logger.debug("Saved %d tasks to %s", len(store), self._path)

    def transact(self, operation: Callable[[TaskStore], Result]) -> Result:
        """load -> one transition -> save (only when it succeeded and changed something)."""
        store = self.load()
        result = operation(store)
        if result.ok and result.store is not None and result.store is not store:
            self.save(result.store)
        return result

    def backup(self, dest_dir: str | Path | None = None) -> Path:
        if not self._path.exists():
            raise StoreError(f"Nothing to back up: {self._path} does not exist")

        target_dir = Path(dest_dir or self._backup_dir or self._path.parent).expanduser()
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S-%f")
        target = target_dir / f"backup-{stamp}.json"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self._path, target)
        except OSError as e:
            raise StoreError(f"Backup failed: {e}") from e

        logger.info("Backup written to %s", target)
        return target

    def export_to(self, path: str | Path) -> Path:
        target = Path(path).expanduser()
        self._write(target, self.load())
        logger.info("Exported store to %s", target)
        return target

    def import_from(self, path: str | Path) -> TaskStore:
        source = Path(path).expanduser()
        if not source.exists():
            raise StoreError(f"Import file not found: {source}")
        store = self._read(source)
        self.save(store)
        logger.info("Imported %d tasks from %s", len(store), source)
        return store
