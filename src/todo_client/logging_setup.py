# src/todo_client/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "todo.log"

# Libraries that log every HTTP exchange at INFO.
QUIET_LIBRARIES = ("httpx", "httpcore")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console view of the log stream.

    Client logs pass, except the per-request lines under `todo_client.api`
    which only show from WARNING up. Everything else (third-party libraries,
    captured `py.warnings`) needs ERROR.
    """

    def __init__(self, app_prefix: str = "todo_client", chatty: tuple[str, ...] = ("api",)) -> None:
        super().__init__()
        self._app = app_prefix + "."
        self._chatty = tuple(f"{self._app}{c}." for c in chatty)

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(self._app):
            return record.levelno >= logging.ERROR
        if record.name.startswith(self._chatty):
            return record.levelno >= logging.WARNING
        return True


def resolve_level(level: int | str, default: int = logging.INFO) -> int:
    """Accept 10 / "debug" / "DEBUG"; unknown names fall back to `default`."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/todo",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Replace the root handlers with a filtered stderr handler and a full
    `todo.log` file handler. Returns the log file path.

    Call once, before the first client call.
    """
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
    console.setLevel(resolve_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    logfile = logging.FileHandler(str(log_file), encoding="utf-8")
    logfile.setLevel(resolve_level(file_level, logging.DEBUG))
    logfile.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(logfile)

    logging.captureWarnings(True)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
