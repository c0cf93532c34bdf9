# src/taskell/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Everything has a default: taskell runs with no configuration at all.
- CLI flags are applied on top through Settings.with_overrides().
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKELL"

DEFAULT_STORE_PATH = Path("taskell.json")
DEFAULT_DATA_DIR = Path("~/.config/taskell")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Load a local .env (never overriding variables already set)."""
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default.expanduser()
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Logging ----
    log_level: str
    log_to_file: bool

    # ---- Local data paths ----
    store_path: Path
    data_dir: Path
    backup_dir: Path

    @staticmethod
    def from_env() -> Settings:
        _load_dotenv()

        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"
        log_to_file = _env_bool(_k("LOG_TO_FILE"), True)

        store_path = _env_path(_k("STORE_PATH"), DEFAULT_STORE_PATH)
        data_dir = _env_path(_k("DATA_DIR"), DEFAULT_DATA_DIR)
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")

        return Settings(
            log_level=log_level,
            log_to_file=log_to_file,
            store_path=store_path,
            data_dir=data_dir,
            backup_dir=backup_dir,
        )

    def with_overrides(
        self, *, store_path: str | Path | None = None, log_level: str | None = None
    ) -> Settings:
        out = self
        if store_path:
            out = replace(out, store_path=Path(store_path).expanduser())
        if log_level:
            out = replace(out, log_level=log_level.strip().upper())
        return out


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
