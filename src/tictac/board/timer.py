# src/tictac/board/timer.py

from __future__ import annotations

"""
Stopwatch state machine.

States: Idle -> Running(task_id, started_at) -> Idle.

The engine is owned by one TaskStore and tracks the single active timer of
that store. It mutates the Task objects it is handed; persisting them is the
store's job. All times are epoch milliseconds.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .models import Task, TimeEntry

logger = logging.getLogger(__name__)


class TimerSignal(StrEnum):
    NONE = "none"
    APPROACHING_LIMIT = "approachingLimit"
    AUTO_STOPPED = "autoStopped"


@dataclass(frozen=True, slots=True)
class TimerLimits:
    """Auto-stop policy: warn once after warn_after, force a stop after stop_after."""

    warn_after_seconds: int = 9000
    stop_after_seconds: int = 10800


class TimerEngine:
    def __init__(self, limits: TimerLimits | None = None) -> None:
        self.limits = limits or TimerLimits()
        self._active_task_id: int | None = None
        self._warned = False

    @property
    def active_task_id(self) -> int | None:
        return self._active_task_id

    @property
    def is_idle(self) -> bool:
        return self._active_task_id is None

    def snapshot(self) -> tuple[int | None, bool]:
        return self._active_task_id, self._warned

    def restore(self, snap: tuple[int | None, bool]) -> None:
        self._active_task_id, self._warned = snap

    def start(self, task: Task, now: int, *, current: Task | None = None) -> TimeEntry | None:
        """
        Start timing task.

        If `current` (the task that is running right now, possibly task itself)
        is running, it is stopped and its entry committed first. Returns that
        committed entry, if any.
        """
        committed = None
        if current is not None and current.is_timer_running:
            committed = self.stop(current, now)

        task.is_timer_running = True
        task.timer_start = now
        self._active_task_id = task.id
        self._warned = False
        logger.debug("Timer started task_id=%s at=%s", task.id, now)
        return committed

    def stop(self, task: Task, now: int) -> TimeEntry | None:
        """Commit the running interval of task. No-op (None) when it is not running."""
        if not task.is_timer_running or task.timer_start is None:
            return None

        duration = (now - task.timer_start) / 1000
        if duration < 0:
            logger.warning(
                "Clock went backwards for task_id=%s (start=%s now=%s); recording 0s.",
                task.id,
                task.timer_start,
                now,
            )
            duration = 0.0

        entry = TimeEntry(date=now, duration=duration)
        task.time_entries.append(entry)
        task.time_spent += duration / 3600
        task.is_timer_running = False
        task.timer_start = None

        if self._active_task_id == task.id:
            self._active_task_id = None
            self._warned = False

        logger.debug("Timer stopped task_id=%s duration=%.3fs", task.id, duration)
        return entry

    @staticmethod
    def elapsed(task: Task, now: int) -> int:
        """Seconds to display: live interval while running, total otherwise."""
        if task.is_timer_running and task.timer_start is not None:
            return max(0, (now - task.timer_start) // 1000)
        return round(task.time_spent * 3600)

    def is_over_cap(self, task: Task, now: int) -> bool:
        """True when a running timer has passed the hard cap and must be stopped."""
        if not task.is_timer_running or task.timer_start is None:
            return False
        return (now - task.timer_start) / 1000 > self.limits.stop_after_seconds

    def check_auto_stop(self, task: Task, now: int) -> TimerSignal:
        """
        Polled safety check for a forgotten timer.

        Past the hard cap the timer is stopped (entry committed) and
        AUTO_STOPPED is returned. Past the warning threshold,
        APPROACHING_LIMIT is returned once per running session.
        Idle tasks always yield NONE.
        """
        if not task.is_timer_running or task.timer_start is None:
            return TimerSignal.NONE

        running_s = (now - task.timer_start) / 1000

        if self.is_over_cap(task, now):
            self.stop(task, now)
            logger.info(
                "Timer auto-stopped task_id=%s after %.0fs (cap=%ss)",
                task.id,
                running_s,
                self.limits.stop_after_seconds,
            )
            return TimerSignal.AUTO_STOPPED

        if running_s > self.limits.warn_after_seconds and not self._warned:
            self._warned = True
            return TimerSignal.APPROACHING_LIMIT

        return TimerSignal.NONE

    def resync(self, tasks: Iterable[Task]) -> list[Task]:
        """
        Rebuild the active pointer from loaded tasks.

        If stored data has several running tasks, the most recently started one
        wins and the others are reset without committing an entry.
        Returns the tasks that were reset.
        """
        running = [t for t in tasks if t.is_timer_running and t.timer_start is not None]
        running.sort(key=lambda t: t.timer_start or 0)

        self._active_task_id = running[-1].id if running else None
        self._warned = False

        reset = running[:-1]
        for t in reset:
            logger.warning("Multiple running timers in stored data; resetting task_id=%s", t.id)
            t.is_timer_running = False
            t.timer_start = None
        return reset
