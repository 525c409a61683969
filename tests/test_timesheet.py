# tests/test_timesheet.py

from __future__ import annotations

from datetime import date, datetime

import pytest

from tictac.board.models import NO_PROJECT, Project, Task, TaskStatus, TimeEntry
from tictac.board.timesheet import (
    clock_in_out,
    daily_summary,
    format_duration,
    range_summary,
    total_for,
)

DAY = date(2024, 3, 5)


def _ms(*args: int) -> int:
    """Local wall-clock time -> epoch millis."""
    return int(datetime(*args).timestamp() * 1000)


@pytest.fixture()
def projects() -> list[Project]:
    return [Project(id=7, name="Seven", position=1000)]


@pytest.fixture()
def tasks() -> list[Task]:
    a = Task(
        id=1,
        title="a",
        status=TaskStatus.IN_PROGRESS,
        project_id=7,
        created_at=_ms(2024, 3, 1, 9),
        time_entries=[
            TimeEntry(date=_ms(2024, 3, 5, 9, 30), duration=1800),
            TimeEntry(date=_ms(2024, 3, 5, 17, 0), duration=3600),
            TimeEntry(date=_ms(2024, 3, 4, 23, 59, 59), duration=60),
        ],
        time_spent=(1800 + 3600 + 60) / 3600,
    )
    b = Task(
        id=2,
        title="b",
        created_at=_ms(2024, 3, 5, 8),
        time_entries=[TimeEntry(date=_ms(2024, 3, 5, 0, 0, 0), duration=600)],
        time_spent=600 / 3600,
    )
    idle = Task(id=3, title="idle", created_at=_ms(2024, 3, 5, 8))
    return [a, b, idle]


def test_daily_summary(tasks, projects) -> None:
    rows = daily_summary(tasks, DAY, projects=projects)

    assert [(r.task, r.project, r.duration) for r in rows] == [
        ("a", "Seven", 5400),
        ("b", NO_PROJECT, 600),
    ]
    assert total_for(rows) == 6000
    assert all(r.date == DAY for r in rows)


def test_daily_summary_project_filter(tasks, projects) -> None:
    rows = daily_summary(tasks, DAY, project_filter=7, projects=projects)
    assert [r.task_id for r in rows] == [1]


def test_daily_summary_day_without_entries(tasks) -> None:
    assert daily_summary(tasks, date(2024, 3, 7)) == []


def test_unknown_project_is_labelled_no_project(tasks) -> None:
    rows = daily_summary(tasks, DAY, projects=[])
    assert rows[0].project == NO_PROJECT


def test_clock_in_out(tasks) -> None:
    span = clock_in_out(tasks, DAY)

    assert span is not None
    assert span.first_entry == datetime(2024, 3, 5, 0, 0, 0)
    assert span.last_entry == datetime(2024, 3, 5, 17, 0)
    assert clock_in_out(tasks, date(2024, 3, 7)) is None


def test_range_summary_counts_entries_twice(tasks, projects) -> None:
    rows = range_summary(tasks, DAY, DAY, projects=projects)

    base = [r for r in rows if r.kind == "base"]
    entries = [r for r in rows if r.kind == "entry"]
    assert [r.task_id for r in base] == [1, 2, 3]
    assert [(r.task_id, r.duration) for r in entries] == [(1, 1800), (1, 3600), (2, 600)]
    assert base[0].date == datetime(2024, 3, 1, 9)

    # base rows already include every entry
    assert total_for(rows) == pytest.approx(5460 + 600 + 1800 + 3600 + 600)


def test_range_summary_spans_days(tasks) -> None:
    rows = range_summary(tasks, date(2024, 3, 4), DAY, project_filter=7)
    assert len([r for r in rows if r.kind == "entry"]) == 3


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "00:00:00"),
        (59.9, "00:00:59"),
        (5400, "01:30:00"),
        (90061, "25:01:01"),
        (-5, "00:00:00"),
    ],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected
