# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tictac.board.store import TaskStore
from tictac.board.timer import TimerEngine, TimerLimits
from tictac.cli.bootstrap import create_initial_state
from tictac.core.state import AppState
from tictac.storage.memory import InMemoryBackend

from .fakes import FakeClock, RecordingNotifier


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tictac-test",
        log_level="DEBUG",
        storage="memory",
        data_dir=tmp_path / "data",
        db_path=tmp_path / "data" / "board.sqlite3",
        firebase_url="",
        firebase_root="timetracker",
        firebase_timeout_seconds=1.0,
        timer_warn_seconds=9000,
        timer_stop_seconds=10800,
        watchdog_interval_seconds=0.01,
        retention_days=5,
        renumber_epsilon=1e-6,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def store(backend: InMemoryBackend, notifier: RecordingNotifier, clock: FakeClock) -> TaskStore:
    """
    TaskStore over an in-memory backend with a controllable clock.
    """
    s = TaskStore(
        backend,
        notifier=notifier,
        timer=TimerEngine(TimerLimits(warn_after_seconds=9000, stop_after_seconds=10800)),
        clock=clock,
    )
    s.load()
    return s


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired through the real composition root, with in-memory storage."""
    st = create_initial_state(settings=settings)
    st.store.load()
    return st
