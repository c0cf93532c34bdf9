# src/taskell/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TaskRepo


@dataclass(slots=True)
class AppState:
    # Settings live on the state so handlers never read global config.
    settings: object
    repo: TaskRepo
