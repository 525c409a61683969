# src/tictac/board/store.py

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.errors import (
    BacklogItemNotFound,
    PartialWriteError,
    PersistenceFailure,
    ProjectNotFound,
    TaskNotFound,
)
from ..core.ports import (
    BACKLOG_ITEMS,
    COLLECTIONS,
    PROJECTS,
    TASKS,
    TIMESHEET_REVIEWS,
    WEEKLY_REVIEWS,
    EventKind,
    Notifier,
    Record,
    StorageBackend,
)
from .models import (
    BacklogItem,
    DailyReview,
    Project,
    Task,
    TaskStatus,
    TimeEntry,
    WeeklyReview,
    now_ms,
    week_start,
)
from .positions import DEFAULT_EPSILON, append_position, insert_between, needs_renumber, renumber
from .timer import TimerEngine, TimerSignal

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

_FIELD_ALIASES = {
    "title": "title",
    "status": "status",
    "due_date": "due_date",
    "dueDate": "due_date",
    "project_id": "project_id",
    "projectId": "project_id",
}

_PROTECTED_FIELDS = {
    "id",
    "position",
    "time_spent",
    "timeSpent",
    "time_entries",
    "timeEntries",
    "is_timer_running",
    "isTimerRunning",
    "timer_start",
    "timerStart",
    "created_at",
    "createdAt",
}


@dataclass(slots=True)
class _Tx:
    """One in-flight store mutation: events to emit after a successful save."""

    events: list[tuple[EventKind, dict[str, Any]]] = field(default_factory=list)

    def emit(self, kind: EventKind, payload: dict[str, Any]) -> None:
        self.events.append((kind, payload))


class TaskStore:
    """
    Authoritative in-memory board state backed by a whole-collection StorageBackend.

    Every mutating method:
    - validates ids first (NotFound errors leave state untouched),
    - mutates the in-memory collections,
    - writes back every touched collection,
    - on a storage failure restores the pre-operation state and raises
      PersistenceFailure (PartialWriteError when some collections were written),
    - emits notifications only after the write succeeded.

    Ids are epoch milliseconds, bumped to stay unique within this store.
    Two processes creating entities in the same millisecond can still collide.

    Not thread-safe: callers serialize access (see AppState.lock).
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        notifier: Notifier | None = None,
        timer: TimerEngine | None = None,
        renumber_epsilon: float = DEFAULT_EPSILON,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._backend = backend
        self._notifier = notifier
        self.timer = timer or TimerEngine()
        self._renumber_epsilon = renumber_epsilon
        self._clock = clock

        self._projects: list[Project] = []
        self._tasks: list[Task] = []
        self._backlog: list[BacklogItem] = []
        self._daily_reviews: list[DailyReview] = []
        self._weekly_reviews: list[WeeklyReview] = []

        self._active_project_id: int | None = None
        self._last_id = 0
        self._loaded = False

    # ---- low-level helpers ----

    def _now(self, now: int | None) -> int:
        return self._clock() if now is None else int(now)

    def _next_id(self) -> int:
        new_id = max(self._clock(), self._last_id + 1)
        self._last_id = new_id
        return new_id

    def _collection(self, name: str) -> list[Any]:
        return {
            PROJECTS: self._projects,
            TASKS: self._tasks,
            BACKLOG_ITEMS: self._backlog,
            TIMESHEET_REVIEWS: self._daily_reviews,
            WEEKLY_REVIEWS: self._weekly_reviews,
        }[name]

    def _snapshot(self) -> dict[str, Any]:
        return {
            "collections": {name: copy.deepcopy(self._collection(name)) for name in COLLECTIONS},
            "timer": self.timer.snapshot(),
            "active_project_id": self._active_project_id,
            "last_id": self._last_id,
        }

    def _restore(self, snap: dict[str, Any]) -> None:
        for name, items in snap["collections"].items():
            self._collection(name)[:] = items
        self.timer.restore(snap["timer"])
        self._active_project_id = snap["active_project_id"]
        self._last_id = snap["last_id"]

    def _save(self, name: str) -> None:
        records: list[Record] = [item.to_record() for item in self._collection(name)]
        self._backend.save(name, records)

    def _emit(self, kind: EventKind, payload: dict[str, Any]) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.notify(kind, payload)
        except Exception:
            logger.exception("Notifier failed kind=%s", kind.value)

    @contextmanager
    def _mutation(self, *collections: str, op: str) -> Iterator[_Tx]:
        if not self._loaded:
            # saves replace whole collections; writing before a load would wipe stored data
            raise PersistenceFailure(f"{op}: board is not loaded; refusing to overwrite storage")

        snap = self._snapshot()
        tx = _Tx()
        try:
            yield tx
        except BaseException:
            self._restore(snap)
            raise

        written: list[str] = []
        for name in collections:
            try:
                self._save(name)
            except Exception as e:
                self._restore(snap)
                failed = [c for c in collections if c not in written]
                if written:
                    logger.error(
                        "%s: partial write (written=%s failed=%s); in-memory state rolled back",
                        op,
                        written,
                        failed,
                    )
                    raise PartialWriteError(
                        f"{op}: saved {', '.join(written)} but not {', '.join(failed)}",
                        written=written,
                        failed=failed,
                    ) from e
                logger.error("%s: could not persist %s; in-memory state rolled back", op, name)
                raise PersistenceFailure(f"{op}: could not persist {name}") from e
            written.append(name)

        for kind, payload in tx.events:
            self._emit(kind, payload)

    def _find_task(self, task_id: int) -> Task:
        for t in self._tasks:
            if t.id == task_id:
                return t
        raise TaskNotFound(task_id)

    def _find_project(self, project_id: int) -> Project:
        for p in self._projects:
            if p.id == project_id:
                return p
        raise ProjectNotFound(project_id)

    def _find_backlog_item(self, item_id: int) -> BacklogItem:
        for b in self._backlog:
            if b.id == item_id:
                return b
        raise BacklogItemNotFound(item_id)

    def _active_task(self) -> Task | None:
        active_id = self.timer.active_task_id
        if active_id is None:
            return None
        for t in self._tasks:
            if t.id == active_id:
                return t
        return None

    def _resolve_project_id(self, project_id: int | None) -> int | None:
        """Explicit id (validated) or the active filter."""
        if project_id is None:
            return self._active_project_id
        self._find_project(project_id)
        return project_id

    @staticmethod
    def _sorted(items: list[Any]) -> list[Any]:
        return sorted(items, key=lambda x: (x.position, x.id))

    # ---- loading ----

    def load(self) -> None:
        """
        Replace in-memory state with the backend's collections.

        Malformed records are skipped with a warning; a backend failure raises
        PersistenceFailure and leaves the current state untouched.

        Until one load has succeeded every mutation raises PersistenceFailure.
        """
        parsers: dict[str, Callable[[Record], Any]] = {
            PROJECTS: Project.from_record,
            TASKS: Task.from_record,
            BACKLOG_ITEMS: BacklogItem.from_record,
            TIMESHEET_REVIEWS: DailyReview.from_record,
            WEEKLY_REVIEWS: WeeklyReview.from_record,
        }
        loaded: dict[str, list[Any]] = {}
        for name in COLLECTIONS:
            try:
                records = self._backend.load(name)
            except Exception as e:
                logger.error("Failed to load collection %s", name)
                raise PersistenceFailure(f"load: could not read {name}") from e

            items = []
            for rec in records or []:
                if not isinstance(rec, dict):
                    logger.warning("Skipping non-object record in %s: %r", name, rec)
                    continue
                try:
                    items.append(parsers[name](rec))
                except Exception:
                    logger.warning("Skipping malformed record in %s: %r", name, rec, exc_info=True)
            loaded[name] = items

        for name, items in loaded.items():
            self._collection(name)[:] = items
        self._loaded = True

        all_ids = [x.id for items in loaded.values() for x in items]
        self._last_id = max(all_ids, default=0)

        if self._active_project_id is not None and not any(
            p.id == self._active_project_id for p in self._projects
        ):
            self._active_project_id = None

        reset = self.timer.resync(self._tasks)
        if reset:
            try:
                self._save(TASKS)
            except Exception:
                logger.warning("Could not persist timer repair; will retry on next write.", exc_info=True)

        logger.info(
            "Board loaded projects=%d tasks=%d backlog=%d active_timer=%s",
            len(self._projects),
            len(self._tasks),
            len(self._backlog),
            self.timer.active_task_id,
        )

    # ---- queries ----

    @property
    def projects(self) -> list[Project]:
        return copy.deepcopy(self._sorted(self._projects))

    @property
    def tasks(self) -> list[Task]:
        return copy.deepcopy(self._tasks)

    @property
    def backlog_items(self) -> list[BacklogItem]:
        return copy.deepcopy(self._backlog)

    @property
    def daily_reviews(self) -> list[DailyReview]:
        return copy.deepcopy(self._daily_reviews)

    @property
    def weekly_reviews(self) -> list[WeeklyReview]:
        return copy.deepcopy(self._weekly_reviews)

    @property
    def active_task_id(self) -> int | None:
        return self.timer.active_task_id

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def active_project_id(self) -> int | None:
        return self._active_project_id

    def get_task(self, task_id: int) -> Task:
        return copy.deepcopy(self._find_task(task_id))

    def get_project(self, project_id: int) -> Project:
        return copy.deepcopy(self._find_project(project_id))

    def get_backlog_item(self, item_id: int) -> BacklogItem:
        return copy.deepcopy(self._find_backlog_item(item_id))

    def visible_tasks(self) -> list[Task]:
        """Tasks matching the active project filter."""
        pid = self._active_project_id
        return copy.deepcopy([t for t in self._tasks if pid is None or t.project_id == pid])

    def column(self, status: TaskStatus) -> list[Task]:
        """One kanban column under the active filter, in display order."""
        return self._sorted([t for t in self.visible_tasks() if t.status == status])

    def select_project(self, project_id: int | None) -> None:
        """Set the active project filter (None = all projects). Not persisted."""
        if project_id is not None:
            self._find_project(project_id)
        self._active_project_id = project_id

    # ---- projects ----

    def create_project(self, name: str, emoji: str = "") -> Project:
        if not name or not name.strip():
            raise ValueError("name is required")

        with self._mutation(PROJECTS, op="create_project") as tx:
            project = Project(
                id=self._next_id(),
                name=name.strip(),
                emoji=(emoji or "").strip(),
                position=append_position(p.position for p in self._projects),
            )
            self._projects.append(project)
            tx.emit(EventKind.CREATED, {"project": project.to_record()})

        logger.debug("Project created id=%s name=%s", project.id, project.name)
        return copy.deepcopy(project)

    def reorder_project(self, project_id: int, target_index: int) -> None:
        moved = self._find_project(project_id)

        with self._mutation(PROJECTS, op="reorder_project") as tx:
            others = self._sorted([p for p in self._projects if p.id != project_id])
            index = max(0, min(int(target_index), len(others)))
            others.insert(index, moved)
            for p, pos in zip(others, renumber(len(others))):
                p.position = pos
            tx.emit(EventKind.UPDATED, {"projectOrder": [p.id for p in others]})

    def delete_project(self, project_id: int) -> None:
        """Delete a project with its tasks and backlog items."""
        project = self._find_project(project_id)
        now = self._clock()

        with self._mutation(PROJECTS, TASKS, BACKLOG_ITEMS, op="delete_project") as tx:
            doomed = [t for t in self._tasks if t.project_id == project_id]
            for t in doomed:
                if self.timer.stop(t, now) is not None:
                    tx.emit(EventKind.TIMER_STOPPED, {"taskId": t.id})

            self._projects.remove(project)
            self._tasks[:] = [t for t in self._tasks if t.project_id != project_id]
            removed_backlog = [b.id for b in self._backlog if b.project_id == project_id]
            self._backlog[:] = [b for b in self._backlog if b.project_id != project_id]

            if self._active_project_id == project_id:
                self._active_project_id = None

            tx.emit(
                EventKind.DELETED,
                {
                    "projectId": project_id,
                    "taskIds": [t.id for t in doomed],
                    "backlogItemIds": removed_backlog,
                },
            )

        logger.info(
            "Project deleted id=%s (tasks=%d backlog=%d)", project_id, len(doomed), len(removed_backlog)
        )

    # ---- tasks ----

    def create_task(
        self,
        title: str,
        status: TaskStatus | str = TaskStatus.TODO,
        due_date: date | None = None,
        project_id: int | None = None,
    ) -> Task:
        """Add a task at the end of its column. project_id defaults to the active filter."""
        if not title or not title.strip():
            raise ValueError("title is required")
        status = TaskStatus(status)
        pid = self._resolve_project_id(project_id)

        with self._mutation(TASKS, op="create_task") as tx:
            task = Task(
                id=self._next_id(),
                title=title.strip(),
                status=status,
                project_id=pid,
                due_date=due_date,
                position=append_position(t.position for t in self._tasks if t.status == status),
                created_at=self._clock(),
            )
            self._tasks.append(task)
            tx.emit(EventKind.CREATED, {"task": task.to_record()})

        logger.debug("Task created id=%s status=%s position=%s", task.id, status.value, task.position)
        return copy.deepcopy(task)

    def move_task(
        self,
        task_id: int,
        new_status: TaskStatus | str,
        prev_sibling_id: int | None = None,
        next_sibling_id: int | None = None,
    ) -> bool:
        """
        Drop a task into new_status between two siblings (either may be None).

        Siblings must already sit in new_status, with prev ordered before next;
        anything else raises ValueError. When the siblings leave no room for a
        midpoint (tied positions, or a head neighbour at 0 or below) the
        destination column is renumbered in its current order first.

        Returns True when the move advanced the task exactly one column
        to the right; a columnAdvanced event is emitted in that case.
        """
        new_status = TaskStatus(new_status)
        task = self._find_task(task_id)
        prev = self._find_task(prev_sibling_id) if prev_sibling_id is not None else None
        nxt = self._find_task(next_sibling_id) if next_sibling_id is not None else None

        others = self._sorted([t for t in self._tasks if t.status == new_status and t.id != task_id])
        for sibling in (prev, nxt):
            if sibling is None:
                continue
            if sibling.id == task_id:
                raise ValueError("a task cannot be its own sibling")
            if sibling.status != new_status:
                raise ValueError(f"task {sibling.id} is not in {new_status.value}")
        if prev is not None and nxt is not None and others.index(prev) >= others.index(nxt):
            raise ValueError(f"task {prev.id} does not come before task {nxt.id}")

        with self._mutation(TASKS, op="move_task") as tx:
            if not self._has_room(prev, nxt):
                logger.info("Renumbering column %s before drop (%d tasks)", new_status.value, len(others))
                for t, pos in zip(others, renumber(len(others))):
                    t.position = pos

            old_status = task.status
            task.position = insert_between(
                prev.position if prev else None,
                nxt.position if nxt else None,
            )
            task.status = new_status

            column = self._sorted(others + [task])
            if needs_renumber([t.position for t in column], self._renumber_epsilon):
                logger.info("Renumbering column %s (%d tasks)", new_status.value, len(column))
                for t, pos in zip(column, renumber(len(column))):
                    t.position = pos

            advanced = new_status.is_next_after(old_status)
            tx.emit(EventKind.UPDATED, {"task": task.to_record()})
            if advanced:
                tx.emit(
                    EventKind.COLUMN_ADVANCED,
                    {"taskId": task.id, "from": old_status.value, "to": new_status.value},
                )

        return advanced

    def _has_room(self, prev: Task | None, nxt: Task | None) -> bool:
        """True when insert_between(prev, nxt) lands strictly between the two."""
        if nxt is None:
            return True
        if prev is None:
            return nxt.position > 0
        return nxt.position - prev.position >= self._renumber_epsilon

    def update_task(self, task_id: int, **fields: Any) -> Task:
        """
        Shallow-merge editable fields: title, status, due_date/dueDate, project_id/projectId.

        Position and timer fields are owned by move_task and the timer methods.
        """
        task = self._find_task(task_id)

        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key in _PROTECTED_FIELDS:
                raise ValueError(f"{key} cannot be changed with update_task")
            attr = _FIELD_ALIASES.get(key)
            if attr is None:
                raise ValueError(f"unknown task field: {key}")
            changes[attr] = value

        if "title" in changes:
            title = str(changes["title"] or "").strip()
            if not title:
                raise ValueError("title is required")
            changes["title"] = title
        if "status" in changes:
            changes["status"] = TaskStatus(changes["status"])
        if changes.get("project_id") is not None:
            self._find_project(changes["project_id"])
        if isinstance(changes.get("due_date"), str):
            changes["due_date"] = date.fromisoformat(changes["due_date"])

        with self._mutation(TASKS, op="update_task") as tx:
            for attr, value in changes.items():
                setattr(task, attr, value)
            tx.emit(EventKind.UPDATED, {"task": task.to_record()})

        return copy.deepcopy(task)

    def delete_task(self, task_id: int, now: int | None = None) -> None:
        """Remove a task; a running timer on it is stopped first."""
        task = self._find_task(task_id)
        now = self._now(now)

        with self._mutation(TASKS, op="delete_task") as tx:
            if self.timer.stop(task, now) is not None:
                tx.emit(EventKind.TIMER_STOPPED, {"taskId": task.id})
            self._tasks.remove(task)
            tx.emit(EventKind.DELETED, {"taskId": task.id})

    # ---- timer ----

    def start_timer(self, task_id: int, now: int | None = None) -> None:
        """Start timing task_id; any other running timer is stopped and committed first."""
        task = self._find_task(task_id)
        now = self._now(now)
        current = self._active_task()

        with self._mutation(TASKS, op="start_timer") as tx:
            committed = self.timer.start(task, now, current=current)
            if committed is not None and current is not None:
                tx.emit(EventKind.TIMER_STOPPED, {"taskId": current.id, "entry": committed.to_record()})
            tx.emit(EventKind.TIMER_STARTED, {"taskId": task.id, "timerStart": now})

        logger.info("Timer started task_id=%s", task_id)

    def stop_timer(self, task_id: int, now: int | None = None) -> TimeEntry | None:
        """Stop and commit task_id's timer. Returns None (and writes nothing) if it is not running."""
        task = self._find_task(task_id)
        if not task.is_timer_running:
            return None
        now = self._now(now)

        with self._mutation(TASKS, op="stop_timer") as tx:
            entry = self.timer.stop(task, now)
            if entry is not None:
                tx.emit(EventKind.TIMER_STOPPED, {"taskId": task.id, "entry": entry.to_record()})

        logger.info("Timer stopped task_id=%s", task_id)
        return copy.deepcopy(entry)

    def elapsed(self, task_id: int, now: int | None = None) -> int:
        return self.timer.elapsed(self._find_task(task_id), self._now(now))

    def check_auto_stop(self, now: int | None = None) -> TimerSignal:
        """
        Polled safety check of the active timer (no-op when idle).

        Only an actual auto-stop goes through a snapshot and a save; the
        approaching-limit warning just notifies.
        """
        task = self._active_task()
        if task is None:
            return TimerSignal.NONE
        now = self._now(now)

        if not self.timer.is_over_cap(task, now):
            signal = self.timer.check_auto_stop(task, now)
            if signal is TimerSignal.APPROACHING_LIMIT:
                self._emit(
                    EventKind.APPROACHING_LIMIT,
                    {"taskId": task.id, "elapsed": self.timer.elapsed(task, now)},
                )
            return signal

        with self._mutation(TASKS, op="check_auto_stop") as tx:
            signal = self.timer.check_auto_stop(task, now)
            entry = task.time_entries[-1]
            tx.emit(EventKind.AUTO_STOPPED, {"taskId": task.id, "entry": entry.to_record()})

        return signal

    # ---- backlog ----

    def add_backlog_item(self, text: str, project_id: int | None = None) -> BacklogItem:
        if not text or not text.strip():
            raise ValueError("text is required")
        pid = self._resolve_project_id(project_id)

        with self._mutation(BACKLOG_ITEMS, op="add_backlog_item") as tx:
            item = BacklogItem(id=self._next_id(), text=text.strip(), project_id=pid, created_at=self._clock())
            self._backlog.append(item)
            tx.emit(EventKind.CREATED, {"backlogItem": item.to_record()})

        return copy.deepcopy(item)

    def delete_backlog_item(self, item_id: int) -> None:
        item = self._find_backlog_item(item_id)
        with self._mutation(BACKLOG_ITEMS, op="delete_backlog_item") as tx:
            self._backlog.remove(item)
            tx.emit(EventKind.DELETED, {"backlogItemId": item_id})

    def convert_backlog_item(self, item_id: int) -> Task:
        """
        Turn a backlog item into a To Do task at the end of the column.

        tasks is written before backlogItems. If the second write fails,
        PartialWriteError is raised; in-memory state is rolled back, so
        retrying the conversion rewrites both collections consistently.
        """
        item = self._find_backlog_item(item_id)

        with self._mutation(TASKS, BACKLOG_ITEMS, op="convert_backlog_item") as tx:
            task = Task(
                id=self._next_id(),
                title=item.text,
                status=TaskStatus.TODO,
                project_id=item.project_id,
                position=append_position(t.position for t in self._tasks if t.status == TaskStatus.TODO),
                created_at=self._clock(),
            )
            self._tasks.append(task)
            self._backlog.remove(item)
            tx.emit(EventKind.CREATED, {"task": task.to_record(), "fromBacklogItemId": item_id})
            tx.emit(EventKind.DELETED, {"backlogItemId": item_id})

        logger.info("Backlog item %s converted to task %s", item_id, task.id)
        return copy.deepcopy(task)

    # ---- retention ----

    def clean_old_done_tasks(self, now: int | None = None, retention_days: int = 5) -> int:
        """
        Remove Done tasks whose last activity is older than retention_days.

        Last activity is the newest time entry, or created_at for tasks
        without entries. Tasks with a running timer are never removed.
        """
        now = self._now(now)
        cutoff = now - int(retention_days) * DAY_MS

        stale = [
            t
            for t in self._tasks
            if t.status == TaskStatus.DONE and not t.is_timer_running and t.last_activity() < cutoff
        ]
        if not stale:
            return 0

        stale_ids = {t.id for t in stale}
        with self._mutation(TASKS, op="clean_old_done_tasks") as tx:
            self._tasks[:] = [t for t in self._tasks if t.id not in stale_ids]
            tx.emit(EventKind.CLEANED, {"count": len(stale_ids), "taskIds": sorted(stale_ids)})

        return len(stale_ids)

    # ---- reviews ----

    def save_daily_review(self, text: str, day: date, project_id: int | None = None) -> DailyReview:
        """Create or replace the review for (day, project). project_id defaults to the active filter."""
        if not text or not text.strip():
            raise ValueError("review text is required")
        pid = self._resolve_project_id(project_id)

        with self._mutation(TIMESHEET_REVIEWS, op="save_daily_review") as tx:
            review = next(
                (r for r in self._daily_reviews if r.date == day and r.project_id == pid),
                None,
            )
            if review is None:
                review = DailyReview(
                    id=self._next_id(), text=text.strip(), date=day, project_id=pid, created_at=self._clock()
                )
                self._daily_reviews.append(review)
                tx.emit(EventKind.CREATED, {"review": review.to_record()})
            else:
                review.text = text.strip()
                tx.emit(EventKind.UPDATED, {"review": review.to_record()})

        return copy.deepcopy(review)

    def get_daily_review(self, day: date, project_id: int | None = None) -> DailyReview | None:
        pid = self._active_project_id if project_id is None else project_id
        for r in self._daily_reviews:
            if r.date == day and r.project_id == pid:
                return copy.deepcopy(r)
        return None

    def save_weekly_review(self, text: str, day: date, project_id: int | None = None) -> WeeklyReview:
        """Create or replace the review for the week containing day."""
        if not text or not text.strip():
            raise ValueError("review text is required")
        pid = self._resolve_project_id(project_id)
        start = week_start(day)

        with self._mutation(WEEKLY_REVIEWS, op="save_weekly_review") as tx:
            review = next(
                (r for r in self._weekly_reviews if r.week_start == start and r.project_id == pid),
                None,
            )
            if review is None:
                review = WeeklyReview(
                    id=self._next_id(), text=text.strip(), week_start=start, project_id=pid, created_at=self._clock()
                )
                self._weekly_reviews.append(review)
                tx.emit(EventKind.CREATED, {"review": review.to_record()})
            else:
                review.text = text.strip()
                tx.emit(EventKind.UPDATED, {"review": review.to_record()})

        return copy.deepcopy(review)

    def get_weekly_review(self, day: date, project_id: int | None = None) -> WeeklyReview | None:
        pid = self._active_project_id if project_id is None else project_id
        start = week_start(day)
        for r in self._weekly_reviews:
            if r.week_start == start and r.project_id == pid:
                return copy.deepcopy(r)
        return None
