# src/taskmirror/logging_setup.py

"""
Logging for the console app.

Two sinks share one formatter:
- stderr, at the level named by TASKMIRROR_LOG_LEVEL, filtered so sync
  messages stay readable between prompts
- a size-capped file under the data dir that always keeps DEBUG, so a failed
  remote write can be inspected after the session
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FILE_NAME = "taskmirror.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3

_HTTP_LOGGERS = ("httpx", "httpcore")


def level_from_name(value: str | int | None, default: int = logging.INFO) -> int:
    """Map "debug" / "WARNING" / 10 to a logging level; unknown names give `default`."""
    if isinstance(value, int):
        return value
    if not value:
        return default
    level = logging.getLevelName(str(value).strip().upper())
    return level if isinstance(level, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console rules:
    - taskmirror records always pass (the handler level still applies)
    - httpx request lines pass only when the console runs at DEBUG
    - everything else, captured warnings included, only at ERROR+
    """

    def __init__(self, console_level: int) -> None:
        super().__init__()
        self._show_http = console_level <= logging.DEBUG

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "taskmirror" or name.startswith("taskmirror."):
            return True
        if self._show_http and name.split(".", 1)[0] in _HTTP_LOGGERS:
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    settings: Any = None,
    *,
    log_dir: str | Path | None = None,
    console_level: str | int | None = None,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure root logging and return the log file path.

    Explicit arguments win over `settings` (log_level, data_dir).
    Call once, before the first request goes out.
    """
    if log_dir is None:
        log_dir = getattr(settings, "data_dir", None) or ".local/taskmirror"
    if console_level is None:
        console_level = getattr(settings, "log_level", None)
    level = level_from_name(console_level)

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter(level))
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        str(log_file),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # httpx logs one INFO line per request; keep those at DEBUG only.
    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return log_file
