# tests/test_retention.py

from __future__ import annotations

from tictac.board.models import TaskStatus
from tictac.board.retention import RetentionSweeper
from tictac.board.store import DAY_MS
from tictac.core.ports import TASKS, EventKind


def _done_task(store, clock, title: str, *, age_days: float):
    created = clock.now
    clock.advance(ms=-int(age_days * DAY_MS))
    task = store.create_task(title, TaskStatus.DONE)
    clock.now = created
    return task


def test_removes_only_stale_done_tasks(store, clock, notifier) -> None:
    old = _done_task(store, clock, "old", age_days=6)
    _done_task(store, clock, "recent", age_days=4)
    store.create_task("old but open")

    removed = RetentionSweeper(store, retention_days=5).run()

    assert removed == 1
    assert sorted(t.title for t in store.tasks) == ["old but open", "recent"]
    assert notifier.of(EventKind.CLEANED) == [{"count": 1, "taskIds": [old.id]}]


def test_recent_time_entry_keeps_old_task(store, clock) -> None:
    task = _done_task(store, clock, "worked yesterday", age_days=10)
    store.start_timer(task.id, now=clock.now - DAY_MS - 60_000)
    store.stop_timer(task.id, now=clock.now - DAY_MS)

    assert store.clean_old_done_tasks() == 0
    assert [t.title for t in store.tasks] == ["worked yesterday"]


def test_running_timer_is_never_cleaned(store, clock) -> None:
    task = _done_task(store, clock, "still running", age_days=10)
    store.start_timer(task.id, now=clock.now - 7 * DAY_MS)

    assert store.clean_old_done_tasks() == 0
    assert store.active_task_id == task.id


def test_nothing_stale_writes_nothing(store, clock, backend) -> None:
    _done_task(store, clock, "fresh", age_days=1)
    saves = len(backend.saves)

    assert RetentionSweeper(store).run() == 0
    assert len(backend.saves) == saves


def test_sweep_failure_is_logged_not_raised(store, clock, backend, caplog) -> None:
    _done_task(store, clock, "old", age_days=6)
    backend.fail_on_save.add(TASKS)

    assert RetentionSweeper(store).run() == 0
    assert [t.title for t in store.tasks] == ["old"]
    assert "Retention sweep could not be persisted" in caplog.text
