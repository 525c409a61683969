# src/tictac/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends and notification sinks swappable and makes testing easier.
"""

from enum import StrEnum
from typing import Any, Protocol

Record = dict[str, Any]
# One persisted entity as a plain JSON-compatible dict (camelCase keys).

PROJECTS = "projects"
TASKS = "tasks"
BACKLOG_ITEMS = "backlogItems"
TIMESHEET_REVIEWS = "timesheetReviews"
WEEKLY_REVIEWS = "weeklyReviews"

COLLECTIONS = (PROJECTS, TASKS, BACKLOG_ITEMS, TIMESHEET_REVIEWS, WEEKLY_REVIEWS)


class EventKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    TIMER_STARTED = "timerStarted"
    TIMER_STOPPED = "timerStopped"
    AUTO_STOPPED = "autoStopped"
    APPROACHING_LIMIT = "approachingLimit"
    COLUMN_ADVANCED = "columnAdvanced"
    CLEANED = "cleaned"


class StorageBackend(Protocol):
    """
    Whole-collection persistence.

    - load() returns [] when the collection does not exist yet.
    - load()/save() raise StorageError only on transport/storage failure.
    - save() replaces the whole collection (no incremental patching).
    """

    def load(self, collection: str) -> list[Record]: ...

    def save(self, collection: str, records: list[Record]) -> None: ...


class Notifier(Protocol):
    """Fire-and-forget event sink (toasts, confetti, logs...)."""

    def notify(self, kind: EventKind, payload: dict[str, Any]) -> None: ...
