# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from taskell.tasks.task_engine import create_empty_store
from taskell.tasks.task_models import Result, TaskStore

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


def at(minutes: float) -> datetime:
    """Deterministic clock: T0 plus the given number of minutes."""
    return T0 + timedelta(minutes=minutes)


class FakeTaskRepo:
    """
    In-memory TaskRepo used for command unit tests.

    Mirrors JsonTaskStore.transact semantics without touching the filesystem,
    and counts saves so tests can assert that failures never persist.
    """

    def __init__(self, store: TaskStore | None = None) -> None:
        self.store = store or create_empty_store()
        self.saves = 0

    @property
    def path(self) -> Path:
        return Path("memory.json")

    def load(self) -> TaskStore:
        return self.store

    def save(self, store: TaskStore) -> None:
        self.store = store
        self.saves += 1

    def transact(self, operation: Callable[[TaskStore], Result]) -> Result:
        result = operation(self.store)
        if result.ok and result.store is not None and result.store is not self.store:
            self.save(result.store)
        return result

    def backup(self, dest_dir=None) -> Path:
        raise NotImplementedError

    def export_to(self, path) -> Path:
        raise NotImplementedError

    def import_from(self, path) -> TaskStore:
        raise NotImplementedError
