# src/tictac/board/models.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any

from ..core.ports import Record

logger = logging.getLogger(__name__)

NO_PROJECT = "No Project"


class TaskStatus(StrEnum):
    """
    Kanban column. The value is the label stored in persisted records.

    Column order is the declaration order (see COLUMN_ORDER).
    """

    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    TO_BE_TESTED = "To be Tested"
    DONE = "Done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except Exception:
            return cls.TODO

    def is_next_after(self, other: TaskStatus) -> bool:
        """True when self is exactly one column to the right of other."""
        return COLUMN_ORDER.index(self) == COLUMN_ORDER.index(other) + 1


COLUMN_ORDER: tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.TO_BE_TESTED,
    TaskStatus.DONE,
)


# ---- time helpers ----


def now_ms() -> int:
    return int(time.time() * 1000)


def to_ms(value: Any) -> int | None:
    """
    Normalize a persisted timestamp to epoch milliseconds.

    Accepts epoch millis (int/float/digit string), ISO-8601 strings
    (older records stored those) and datetime objects.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)
        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp %r; ignoring.", value)
            return None
        return int(dt.timestamp() * 1000)
    return None


def ms_to_datetime(ms: int) -> datetime:
    """Epoch millis -> naive local datetime."""
    return datetime.fromtimestamp(ms / 1000)


def day_bounds_ms(day: date) -> tuple[int, int]:
    """Inclusive [start, end] of a local calendar day, in epoch millis."""
    start = datetime.combine(day, datetime.min.time())
    end = start + timedelta(days=1)
    return int(start.timestamp() * 1000), int(end.timestamp() * 1000) - 1


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def _to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Unparseable date %r; ignoring.", value)
        return None


def _to_id(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ---- entities ----


@dataclass(slots=True)
class TimeEntry:
    date: int
    duration: float

    def to_record(self) -> Record:
        return {"date": self.date, "duration": self.duration}

    @classmethod
    def from_record(cls, data: Record) -> TimeEntry:
        return cls(
            date=to_ms(data.get("date")) or 0,
            duration=float(data.get("duration") or 0.0),
        )


@dataclass(slots=True)
class Project:
    id: int
    name: str
    emoji: str = ""
    position: float = 0.0

    def to_record(self) -> Record:
        return {"id": self.id, "name": self.name, "emoji": self.emoji, "position": self.position}

    @classmethod
    def from_record(cls, data: Record) -> Project:
        return cls(
            id=_to_id(data.get("id")) or 0,
            name=str(data.get("name") or ""),
            emoji=str(data.get("emoji") or ""),
            position=float(data.get("position") or 0.0),
        )


@dataclass(slots=True)
class Task:
    id: int
    title: str
    status: TaskStatus = TaskStatus.TODO
    project_id: int | None = None
    due_date: date | None = None
    position: float = 0.0
    time_spent: float = 0.0  # hours
    created_at: int = 0
    time_entries: list[TimeEntry] = field(default_factory=list)
    is_timer_running: bool = False
    timer_start: int | None = None
    reviews: list[Any] = field(default_factory=list)  # legacy, passed through

    def last_activity(self) -> int:
        """Latest time-entry timestamp, or created_at when there are none."""
        if self.time_entries:
            return max(e.date for e in self.time_entries)
        return self.created_at

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "status": self.status.value,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "position": self.position,
            "timeSpent": self.time_spent,
            "createdAt": self.created_at,
            "timeEntries": [e.to_record() for e in self.time_entries],
            "isTimerRunning": self.is_timer_running,
            "timerStart": self.timer_start,
            "reviews": list(self.reviews),
        }

    @classmethod
    def from_record(cls, data: Record) -> Task:
        entries_raw = data.get("timeEntries") or []
        entries = [TimeEntry.from_record(e) for e in entries_raw if isinstance(e, dict)]

        timer_start = to_ms(data.get("timerStart"))
        running = bool(data.get("isTimerRunning")) and timer_start is not None

        return cls(
            id=_to_id(data.get("id")) or 0,
            title=str(data.get("title") or ""),
            status=TaskStatus.from_db(data.get("status")),
            project_id=_to_id(data.get("projectId")),
            due_date=_to_date(data.get("dueDate")),
            position=float(data.get("position") or 0.0),
            time_spent=float(data.get("timeSpent") or 0.0),
            created_at=to_ms(data.get("createdAt")) or 0,
            time_entries=entries,
            is_timer_running=running,
            timer_start=timer_start if running else None,
            reviews=list(data.get("reviews") or []),
        )


@dataclass(slots=True)
class BacklogItem:
    id: int
    text: str
    project_id: int | None = None
    created_at: int = 0
    status: str = "open"

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "text": self.text,
            "projectId": self.project_id,
            "createdAt": self.created_at,
            "status": self.status,
        }

    @classmethod
    def from_record(cls, data: Record) -> BacklogItem:
        return cls(
            id=_to_id(data.get("id")) or 0,
            text=str(data.get("text") or ""),
            project_id=_to_id(data.get("projectId")),
            created_at=to_ms(data.get("createdAt")) or 0,
            status=str(data.get("status") or "open"),
        )


@dataclass(slots=True)
class DailyReview:
    id: int
    text: str
    date: date
    project_id: int | None = None
    created_at: int = 0

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "text": self.text,
            "date": self.date.isoformat(),
            "projectId": self.project_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, data: Record) -> DailyReview:
        return cls(
            id=_to_id(data.get("id")) or 0,
            text=str(data.get("text") or ""),
            date=_to_date(data.get("date")) or date.today(),
            project_id=_to_id(data.get("projectId")),
            created_at=to_ms(data.get("createdAt")) or 0,
        )


@dataclass(slots=True)
class WeeklyReview:
    id: int
    text: str
    week_start: date
    project_id: int | None = None
    created_at: int = 0

    def to_record(self) -> Record:
        return {
            "id": self.id,
            "text": self.text,
            "weekStart": self.week_start.isoformat(),
            "projectId": self.project_id,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, data: Record) -> WeeklyReview:
        return cls(
            id=_to_id(data.get("id")) or 0,
            text=str(data.get("text") or ""),
            week_start=week_start(_to_date(data.get("weekStart")) or date.today()),
            project_id=_to_id(data.get("projectId")),
            created_at=to_ms(data.get("createdAt")) or 0,
        )
