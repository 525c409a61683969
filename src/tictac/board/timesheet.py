# src/tictac/board/timesheet.py

from __future__ import annotations

"""
Read-side timesheet computations.

Everything here is pure: it takes task/project lists (as returned by
TaskStore) and never touches the store. Day boundaries are local time,
inclusive on both ends.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from .models import NO_PROJECT, Project, Task, TaskStatus, day_bounds_ms, ms_to_datetime


@dataclass(frozen=True, slots=True)
class SummaryRow:
    date: date
    project: str
    task: str
    status: TaskStatus
    due_date: date | None
    duration: float  # seconds
    task_id: int
    is_running: bool


@dataclass(frozen=True, slots=True)
class RangeRow:
    """
    One row of a date-range timesheet.

    kind="base" rows carry a task's whole time_spent dated at its creation;
    kind="entry" rows carry a single time entry.
    """

    kind: str
    date: datetime
    project: str
    task: str
    status: TaskStatus
    duration: float  # seconds
    task_id: int


@dataclass(frozen=True, slots=True)
class ClockInOut:
    first_entry: datetime
    last_entry: datetime


def _project_names(projects: Iterable[Project]) -> dict[int, str]:
    return {p.id: p.name for p in projects}


def _matches(task: Task, project_filter: int | None) -> bool:
    return project_filter is None or task.project_id == project_filter


def _project_label(task: Task, names: dict[int, str]) -> str:
    if task.project_id is None:
        return NO_PROJECT
    return names.get(task.project_id, NO_PROJECT)


def daily_summary(
    tasks: Sequence[Task],
    day: date,
    project_filter: int | None = None,
    projects: Iterable[Project] = (),
) -> list[SummaryRow]:
    """Per-task time logged on `day`; tasks with nothing logged that day are left out."""
    start, end = day_bounds_ms(day)
    names = _project_names(projects)

    rows: list[SummaryRow] = []
    for task in tasks:
        if not _matches(task, project_filter):
            continue
        seconds = sum(e.duration for e in task.time_entries if start <= e.date <= end)
        if seconds <= 0:
            continue
        rows.append(
            SummaryRow(
                date=day,
                project=_project_label(task, names),
                task=task.title,
                status=task.status,
                due_date=task.due_date,
                duration=seconds,
                task_id=task.id,
                is_running=task.is_timer_running,
            )
        )

    # sorted() is stable: equal dates keep task order
    return sorted(rows, key=lambda r: r.date, reverse=True)


def total_for(rows: Iterable[SummaryRow | RangeRow]) -> float:
    return sum(r.duration for r in rows)


def clock_in_out(tasks: Sequence[Task], day: date) -> ClockInOut | None:
    """
    Earliest and latest time-entry timestamps on `day`, across all tasks.

    Entries are stamped when a timer stops, so this only approximates
    when the working day started and ended.
    """
    start, end = day_bounds_ms(day)
    stamps = [e.date for t in tasks for e in t.time_entries if start <= e.date <= end]
    if not stamps:
        return None
    return ClockInOut(first_entry=ms_to_datetime(min(stamps)), last_entry=ms_to_datetime(max(stamps)))


def range_summary(
    tasks: Sequence[Task],
    start_day: date,
    end_day: date,
    project_filter: int | None = None,
    projects: Iterable[Project] = (),
) -> list[RangeRow]:
    """
    Rows for a date range: a base row per task plus one row per entry in range.

    The base row already includes every entry, so total_for() over this
    list counts logged time twice. Kept as-is because existing reports
    read it this way.
    """
    start, _ = day_bounds_ms(start_day)
    _, end = day_bounds_ms(end_day)
    names = _project_names(projects)

    rows: list[RangeRow] = []
    for task in tasks:
        if not _matches(task, project_filter):
            continue
        label = _project_label(task, names)
        rows.append(
            RangeRow(
                kind="base",
                date=ms_to_datetime(task.created_at),
                project=label,
                task=task.title,
                status=task.status,
                duration=task.time_spent * 3600,
                task_id=task.id,
            )
        )
        for entry in task.time_entries:
            if start <= entry.date <= end:
                rows.append(
                    RangeRow(
                        kind="entry",
                        date=ms_to_datetime(entry.date),
                        project=label,
                        task=task.title,
                        status=task.status,
                        duration=entry.duration,
                        task_id=task.id,
                    )
                )
    return rows


def format_duration(seconds: float) -> str:
    """Seconds -> HH:MM:SS (each unit floored, hours may exceed 24)."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
