# src/taskell/core/ports.py

"""
Ports (interfaces) used by the command layer.

Commands depend on this Protocol rather than on JsonTaskStore, so tests can
swap in an in-memory repo and the storage format stays replaceable.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..tasks.task_models import Result, TaskStore


class TaskRepo(Protocol):
    @property
    def path(self) -> Path: ...

    def load(self) -> TaskStore: ...
    def save(self, store: TaskStore) -> None: ...
    def transact(self, operation: Callable[[TaskStore], Result]) -> Result: ...

    # File-level maintenance (backup/export/import)
    def backup(self, dest_dir: str | Path | None = None) -> Path: ...
    def export_to(self, path: str | Path) -> Path: ...
    def import_from(self, path: str | Path) -> TaskStore: ...
