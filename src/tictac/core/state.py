# src/tictac/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..board.retention import RetentionSweeper
from ..board.store import TaskStore
from ..notify import CallbackNotifier
from .ports import StorageBackend


@dataclass
class AppState:
    # Settings are kept on the state for easy access in commands.
    settings: Any

    backend: StorageBackend
    store: TaskStore
    sweeper: RetentionSweeper
    events: CallbackNotifier

    # Console thread and watchdog thread both take this before touching the store.
    lock: threading.RLock = field(default_factory=threading.RLock)
