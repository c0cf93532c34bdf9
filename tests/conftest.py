# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskell.core.state import AppState
from taskell.tasks.task_store import JsonTaskStore

from .fakes import FakeTaskRepo


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        store_path=tmp_path / "taskell.json",
        data_dir=tmp_path / "data",
        backup_dir=tmp_path / "backups",
        log_level="WARNING",
        log_to_file=False,
    )


@pytest.fixture()
def repo(settings: SimpleNamespace) -> JsonTaskStore:
    return JsonTaskStore(settings.store_path, backup_dir=settings.backup_dir)


@pytest.fixture()
def state(settings: SimpleNamespace, repo: JsonTaskStore) -> AppState:
    """AppState over a real JSON store in tmp_path."""
    return AppState(settings=settings, repo=repo)


@pytest.fixture()
def memory_state(settings: SimpleNamespace) -> AppState:
    """AppState over an in-memory repo (no filesystem)."""
    return AppState(settings=settings, repo=FakeTaskRepo())
