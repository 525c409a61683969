# src/tictac/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the board, runs the retention
sweep once, then starts:
- the timer watchdog in a background thread,
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
from typing import Any

from ..board.timesheet import format_duration
from ..board.watchdog import WatchdogThread
from .bootstrap import create_initial_state
from ..config import get_settings
from ..core.errors import PersistenceFailure
from ..core.ports import EventKind
from ..logging_setup import setup_logging
from .console import print_ts, run_console_loop

logger = logging.getLogger(__name__)

_CONSOLE_EVENTS = {
    EventKind.APPROACHING_LIMIT,
    EventKind.AUTO_STOPPED,
    EventKind.CLEANED,
}


def _announce(kind: EventKind, payload: dict[str, Any]) -> None:
    """Console side of the notifier: the few events a user should see unprompted."""
    if kind is EventKind.APPROACHING_LIMIT:
        print_ts(
            f"Timer for task {payload.get('taskId')} has been running "
            f"{format_duration(payload.get('elapsed', 0))}; it will stop automatically soon."
        )
    elif kind is EventKind.AUTO_STOPPED:
        entry = payload.get("entry") or {}
        print_ts(
            f"Timer for task {payload.get('taskId')} was stopped automatically "
            f"after {format_duration(entry.get('duration', 0))}."
        )
    elif kind is EventKind.CLEANED:
        print_ts(f"Cleaned up {payload.get('count', 0)} old done task(s).")


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        close = getattr(state.backend, "close", None)
        if close is not None:
            close()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)

    logger.info("Starting %s... (log file %s)", settings.app_name, log_file)

    state = create_initial_state(settings=settings)
    state.events.subscribe(_announce, kinds=_CONSOLE_EVENTS)

    try:
        state.store.load()
    except PersistenceFailure:
        # running on an empty board would overwrite the stored one on the first save
        logger.exception("Could not load the board; exiting without touching storage.")
        _shutdown(state)
        raise SystemExit(1) from None

    state.sweeper.run()

    watchdog = WatchdogThread(
        state.store,
        interval_seconds=settings.watchdog_interval_seconds,
        lock=state.lock,
    )
    watchdog.start()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        logger.debug("SIGTERM handler not installed on this platform.")

    try:
        run_console_loop(state)
    finally:
        watchdog.stop()
        watchdog.join(timeout=5.0)
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
