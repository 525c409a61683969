# src/tictac/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "tictac.log"

# Minimum console level per logger prefix; the longest matching prefix wins.
_CONSOLE_FLOORS: dict[str, int] = {
    "tictac": logging.DEBUG,
    # one poll per second; only warnings and tick failures are worth showing
    "tictac.board.watchdog": logging.WARNING,
    # every board event; the timer-limit ones arrive at WARNING
    "tictac.events": logging.WARNING,
    "py.warnings": logging.ERROR,
}
_DEFAULT_FLOOR = logging.ERROR


def console_floor(name: str) -> int:
    best = ""
    for prefix in _CONSOLE_FLOORS:
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best = prefix
    return _CONSOLE_FLOORS[best] if best else _DEFAULT_FLOOR


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the board console readable while the REPL is waiting for input.

    Events and watchdog polls still go to the log file in full.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_floor(record.name)


def resolve_level(level: str | int | None, default: int = logging.INFO) -> int:
    """Accept 'debug', 'WARNING', '10' or an int; unknown names fall back to *default*."""
    if level is None:
        return default
    if isinstance(level, int):
        return level
    text = str(level).strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/tictac",
    console_level: str | int | None = logging.INFO,
    file_level: str | int | None = logging.DEBUG,
) -> Path:
    """
    Configure logging with:
    - Console handler: filtered for the interactive board
    - File handler: full logs, including every board event

    Call this ONCE, very early (before first logger.info). Returns the log file path.
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

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(resolve_level(console_level))
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(resolve_level(file_level, logging.DEBUG))
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # HTTP client chatter from the Firebase backend is only useful when it fails
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
