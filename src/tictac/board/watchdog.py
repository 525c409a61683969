# src/tictac/board/watchdog.py

from __future__ import annotations

"""
Timer watchdog.

A small polling loop that asks the store to enforce the auto-stop policy
on the active timer. The store decides what happens (warn once, force a
stop); this module only provides the clock tick.
"""

import asyncio
import contextlib
import logging
import threading

from .store import TaskStore
from .timer import TimerSignal

logger = logging.getLogger(__name__)


def tick(store: TaskStore, *, lock: threading.RLock | None = None) -> TimerSignal:
    """One watchdog check. Errors are logged, never raised."""
    try:
        with lock if lock is not None else contextlib.nullcontext():
            signal = store.check_auto_stop()
    except Exception:
        logger.exception("check_auto_stop failed")
        return TimerSignal.NONE

    if signal is not TimerSignal.NONE:
        logger.info("Watchdog signal=%s task_id=%s", signal.value, store.active_task_id)
    return signal


async def run_timer_watchdog(
    store: TaskStore,
    *,
    interval_seconds: float = 1.0,
    lock: threading.RLock | None = None,
) -> None:
    """
    Poll store.check_auto_stop() every interval_seconds.

    To stop the watchdog, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    logger.debug("Timer watchdog started (interval=%ss)", sleep_s)

    while True:
        tick(store, lock=lock)
        await asyncio.sleep(sleep_s)


class WatchdogThread(threading.Thread):
    """Runs run_timer_watchdog on a private event loop in a daemon thread."""

    def __init__(
        self,
        store: TaskStore,
        *,
        interval_seconds: float = 1.0,
        lock: threading.RLock | None = None,
    ) -> None:
        super().__init__(name="tictac-watchdog", daemon=True)
        self._store = store
        self._interval = interval_seconds
        self._lock = lock
        self._loop = asyncio.new_event_loop()
        self._task: asyncio.Task[None] | None = None

    def run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._task = self._loop.create_task(
            run_timer_watchdog(self._store, interval_seconds=self._interval, lock=self._lock)
        )
        try:
            self._loop.run_until_complete(self._task)
        except asyncio.CancelledError:
            logger.debug("Timer watchdog cancelled")
        finally:
            self._loop.close()

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    def stop(self) -> None:
        # the loop may already be closed if the watchdog finished on its own
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._cancel)
