# src/tictac/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the storage backend,
- wires TimerEngine / TaskStore / RetentionSweeper / notifiers into AppState.
"""

from __future__ import annotations

import logging

from ..board.retention import RetentionSweeper
from ..board.store import TaskStore
from ..board.timer import TimerEngine, TimerLimits
from ..config import get_settings
from ..core.ports import StorageBackend
from ..core.state import AppState
from ..notify import CallbackNotifier, LoggingNotifier
from ..storage.firebase import FirebaseBackend
from ..storage.json_backend import JsonFileBackend
from ..storage.memory import InMemoryBackend
from ..storage.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def build_backend(settings) -> StorageBackend:
    kind = getattr(settings, "storage", "sqlite")

    if kind == "memory":
        return InMemoryBackend()

    if kind == "json":
        return JsonFileBackend(settings.data_dir / "collections")

    if kind == "firebase":
        if settings.firebase_url:
            backend = FirebaseBackend(
                settings.firebase_url,
                root=settings.firebase_root,
                timeout=settings.firebase_timeout_seconds,
                backup=JsonFileBackend(settings.data_dir / "backup"),
            )
            backend.check_connection()
            return backend
        logger.warning("TICTAC_STORAGE=firebase but TICTAC_FIREBASE_URL is empty; using SQLite.")

    return SQLiteBackend(settings.db_path)


def create_initial_state(*, settings=None, backend: StorageBackend | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the backend) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if backend is None:
        backend = build_backend(settings)

    events = CallbackNotifier()
    events.subscribe(LoggingNotifier().notify)

    timer = TimerEngine(
        TimerLimits(
            warn_after_seconds=settings.timer_warn_seconds,
            stop_after_seconds=settings.timer_stop_seconds,
        )
    )
    store = TaskStore(
        backend,
        notifier=events,
        timer=timer,
        renumber_epsilon=settings.renumber_epsilon,
    )

    return AppState(
        settings=settings,
        backend=backend,
        store=store,
        sweeper=RetentionSweeper(store, settings.retention_days),
        events=events,
    )
