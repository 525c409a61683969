# tests/test_timer.py

from __future__ import annotations

import pytest

from tictac.board.models import Task
from tictac.board.timer import TimerEngine, TimerLimits, TimerSignal

T0 = 1_700_000_000_000


def _task(task_id: int = 1) -> Task:
    return Task(id=task_id, title=f"task {task_id}", created_at=T0)


def test_start_then_stop_commits_one_entry() -> None:
    engine = TimerEngine()
    task = _task()

    engine.start(task, T0)
    assert task.is_timer_running and task.timer_start == T0
    assert engine.active_task_id == task.id

    entry = engine.stop(task, T0 + 5_400_000)

    assert entry is not None and entry.duration == 5400
    assert task.time_spent == pytest.approx(1.5, abs=1e-9)
    assert [e.duration for e in task.time_entries] == [5400]
    assert not task.is_timer_running and task.timer_start is None
    assert engine.is_idle


@pytest.mark.parametrize(("t0", "t1"), [(0, 1), (T0, T0 + 999), (T0, T0 + 12_345_678)])
def test_round_trip_accounting(t0: int, t1: int) -> None:
    engine = TimerEngine()
    task = _task()
    task.time_spent = 0.25
    before = task.time_spent

    engine.start(task, t0)
    engine.stop(task, t1)

    assert task.time_spent - before == pytest.approx((t1 - t0) / 1000 / 3600, abs=1e-9)
    assert task.time_entries[-1].duration == (t1 - t0) / 1000


def test_stop_when_not_running_is_a_noop() -> None:
    engine = TimerEngine()
    task = _task()

    assert engine.stop(task, T0) is None
    assert task.time_entries == []
    assert task.time_spent == 0


def test_start_commits_the_currently_running_task() -> None:
    engine = TimerEngine()
    a, b = _task(1), _task(2)

    engine.start(a, T0)
    committed = engine.start(b, T0 + 60_000, current=a)

    assert committed is not None and committed.duration == 60
    assert not a.is_timer_running
    assert len(a.time_entries) == 1
    assert b.is_timer_running
    assert engine.active_task_id == b.id


def test_elapsed_running_and_idle() -> None:
    engine = TimerEngine()
    task = _task()
    task.time_spent = 1.0

    assert engine.elapsed(task, T0) == 3600

    engine.start(task, T0)
    assert engine.elapsed(task, T0 + 1_999) == 1


def test_auto_stop_past_hard_cap() -> None:
    engine = TimerEngine()
    task = _task()
    engine.start(task, T0)

    assert engine.check_auto_stop(task, T0 + 10_801_000) is TimerSignal.AUTO_STOPPED
    assert not task.is_timer_running
    assert task.time_entries[-1].duration == 10801
    # idempotent once stopped
    assert engine.check_auto_stop(task, T0 + 20_000_000) is TimerSignal.NONE


def test_exactly_at_cap_is_not_stopped() -> None:
    engine = TimerEngine()
    task = _task()
    engine.start(task, T0)

    assert engine.check_auto_stop(task, T0 + 10_800_000) is TimerSignal.APPROACHING_LIMIT
    assert task.is_timer_running


def test_approaching_limit_fires_once_per_session() -> None:
    engine = TimerEngine()
    task = _task()
    engine.start(task, T0)

    assert engine.check_auto_stop(task, T0 + 8_999_000) is TimerSignal.NONE
    assert engine.check_auto_stop(task, T0 + 9_001_000) is TimerSignal.APPROACHING_LIMIT
    assert engine.check_auto_stop(task, T0 + 9_002_000) is TimerSignal.NONE
    assert engine.check_auto_stop(task, T0 + 9_500_000) is TimerSignal.NONE

    # a new session re-arms the warning
    engine.stop(task, T0 + 9_600_000)
    engine.start(task, T0 + 10_000_000)
    assert engine.check_auto_stop(task, T0 + 10_000_000 + 9_001_000) is TimerSignal.APPROACHING_LIMIT


def test_custom_limits() -> None:
    engine = TimerEngine(TimerLimits(warn_after_seconds=10, stop_after_seconds=20))
    task = _task()
    engine.start(task, T0)

    assert engine.check_auto_stop(task, T0 + 11_000) is TimerSignal.APPROACHING_LIMIT
    assert engine.check_auto_stop(task, T0 + 21_000) is TimerSignal.AUTO_STOPPED


def test_resync_keeps_latest_running_task() -> None:
    engine = TimerEngine()
    old, new, idle = _task(1), _task(2), _task(3)
    old.is_timer_running, old.timer_start = True, T0
    new.is_timer_running, new.timer_start = True, T0 + 1000

    reset = engine.resync([old, new, idle])

    assert reset == [old]
    assert engine.active_task_id == new.id
    assert not old.is_timer_running and old.timer_start is None
    assert old.time_entries == []
