# src/taskell/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskell.log"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the terminal readable:
    - allow taskell logs at the configured level
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress any other third-party output unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == "taskell" or name.startswith("taskell."):
            return True

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
    log_to_file: bool = True,
) -> Path | None:
    """
    Configure logging with:
    - Console handler: stderr, filtered, at console_level
    - File handler (optional): full logs in <log_dir>/taskell.log

    Call this ONCE, before the first command runs. Returns the log file path
    (None when file logging is off or the directory cannot be created).
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    log_file: Path | None = None
    if log_to_file and log_dir is not None:
        try:
            directory = Path(log_dir).expanduser()
            directory.mkdir(parents=True, exist_ok=True)
            log_file = directory / LOG_FILE_NAME
            fh = logging.FileHandler(str(log_file), encoding="utf-8")
        except OSError:
            # A read-only home must not stop the CLI from working.
            logging.getLogger(__name__).warning("File logging disabled (cannot use %s)", log_dir)
            log_file = None
        else:
            fh.setLevel(file_level)
            fh.setFormatter(fmt)
            root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
    return log_file
