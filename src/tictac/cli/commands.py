# src/tictac/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..board.models import COLUMN_ORDER, Task, TaskStatus
from ..board.timesheet import clock_in_out, daily_summary, format_duration, total_for
from ..core.errors import BoardError, NotFoundError, PartialWriteError, PersistenceFailure
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

STATUS_KEYWORDS: dict[str, TaskStatus] = {
    "todo": TaskStatus.TODO,
    "doing": TaskStatus.IN_PROGRESS,
    "progress": TaskStatus.IN_PROGRESS,
    "test": TaskStatus.TO_BE_TESTED,
    "testing": TaskStatus.TO_BE_TESTED,
    "done": TaskStatus.DONE,
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /start, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Board errors are turned into a reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except NotFoundError as e:
            return f"Not found: {e}"
        except PartialWriteError as e:
            logger.warning("Partial write in /%s: %s", name, e)
            return f"Only part of the change was saved ({e}). Please run the command again."
        except PersistenceFailure as e:
            return f"Could not save ({e}). Nothing was changed."
        except (BoardError, ValueError) as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _int_arg(raw: str, what: str = "id") -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{what} must be a number, got {raw!r}") from None


def _status_arg(raw: str) -> TaskStatus:
    status = STATUS_KEYWORDS.get(raw.lower())
    if status is None:
        raise ValueError(f"unknown status {raw!r} (use: {', '.join(STATUS_KEYWORDS)})")
    return status


def _task_line(state: AppState, task: Task) -> str:
    seconds = state.store.elapsed(task.id)
    running = " [running]" if task.is_timer_running else ""
    due = f" due {task.due_date.isoformat()}" if task.due_date else ""
    return f"  [{task.id}] {task.title}  {format_duration(seconds)}{running}{due}"


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    active = store.active_task_id
    if active is None:
        timer = "idle"
    else:
        task = store.get_task(active)
        timer = f"{task.title} ({format_duration(store.elapsed(active))})"

    pid = store.active_project_id
    project = "all" if pid is None else store.get_project(pid).name
    return (
        "Status:\n"
        f"  Storage: {getattr(state.settings, 'storage', '?')}\n"
        f"  Project filter: {project}\n"
        f"  Timer: {timer}\n"
        f"  Tasks: {len(store.tasks)}  Backlog: {len(store.backlog_items)}"
    )


def cmd_projects(state: AppState, args: list[str]) -> str:
    projects = state.store.projects
    if not projects:
        return "No projects yet. Use /project add <emoji> <name>."
    active = state.store.active_project_id
    lines = ["Projects:"]
    for p in projects:
        mark = "*" if p.id == active else " "
        lines.append(f" {mark}[{p.id}] {p.emoji} {p.name}".rstrip())
    return "\n".join(lines)


def cmd_project(state: AppState, args: list[str]) -> str:
    """
    /project add <emoji> <name>
    /project rm <id>
    /project move <id> <index>
    """
    usage = "Usage: /project add <emoji> <name> | /project rm <id> | /project move <id> <index>"
    if not args:
        return usage

    sub = args[0].lower()
    if sub == "add" and len(args) >= 3:
        project = state.store.create_project(" ".join(args[2:]), args[1])
        return f"Project created: [{project.id}] {project.emoji} {project.name}"

    if sub == "rm" and len(args) == 2:
        project_id = _int_arg(args[1])
        state.store.delete_project(project_id)
        return f"Project {project_id} deleted (with its tasks and backlog items)."

    if sub == "move" and len(args) == 3:
        state.store.reorder_project(_int_arg(args[1]), _int_arg(args[2], "index"))
        return cmd_projects(state, [])

    return usage


def cmd_use(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() == "all":
        state.store.select_project(None)
        return "Showing all projects."
    project_id = _int_arg(args[0])
    state.store.select_project(project_id)
    return f"Showing project: {state.store.get_project(project_id).name}"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    lines: list[str] = []
    for status in COLUMN_ORDER:
        column = state.store.column(status)
        lines.append(f"{status.value} ({len(column)})")
        lines.extend(_task_line(state, t) for t in column)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """/add [todo|doing|test|done] <title>"""
    if not args:
        return "Usage: /add [todo|doing|test|done] <title>"
    status = TaskStatus.TODO
    if args[0].lower() in STATUS_KEYWORDS and len(args) > 1:
        status = STATUS_KEYWORDS[args[0].lower()]
        args = args[1:]
    task = state.store.create_task(" ".join(args), status)
    return f"Task created: [{task.id}] {task.title} ({task.status.value})"


def cmd_move(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /move <id> <status>                 -> end of column
    /move <id> <status> after <other>   -> right below other
    /move <id> <status> before <other>  -> right above other
    """
    usage = "Usage: /move <id> <todo|doing|test|done> [after <id> | before <id>]"
    if len(args) not in (2, 4):
        return usage

    task_id = _int_arg(args[0])
    status = _status_arg(args[1])
    column = [t for t in state.store.column(status) if t.id != task_id]
    ids = [t.id for t in column]

    prev_id: int | None = ids[-1] if ids else None
    next_id: int | None = None
    if len(args) == 4:
        anchor = _int_arg(args[3])
        if anchor not in ids:
            return f"Task {anchor} is not in {status.value}."
        i = ids.index(anchor)
        if args[2].lower() == "after":
            prev_id, next_id = anchor, (ids[i + 1] if i + 1 < len(ids) else None)
        elif args[2].lower() == "before":
            prev_id, next_id = (ids[i - 1] if i > 0 else None), anchor
        else:
            return usage

    advanced = state.store.move_task(task_id, status, prev_id, next_id)
    if advanced and emit:
        emit("Nice, one column closer to Done!")
    return f"Task {task_id} moved to {status.value}."


def cmd_start(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /start <task id>"
    task_id = _int_arg(args[0])
    state.store.start_timer(task_id)
    return f"Timer started for task {task_id}."


def cmd_stop(state: AppState, args: list[str]) -> str:
    task_id = _int_arg(args[0]) if args else state.store.active_task_id
    if task_id is None:
        return "No timer is running."
    entry = state.store.stop_timer(task_id)
    if entry is None:
        return f"Task {task_id} has no running timer."
    return f"Timer stopped for task {task_id}: {format_duration(entry.duration)} logged."


def cmd_rm(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /rm <task id>"
    task_id = _int_arg(args[0])
    state.store.delete_task(task_id)
    return f"Task {task_id} deleted."


def cmd_today(state: AppState, args: list[str]) -> str:
    """/today [YYYY-MM-DD] -> timesheet for one day under the active filter"""
    day = date.fromisoformat(args[0]) if args else date.today()
    store = state.store
    tasks = store.tasks
    rows = daily_summary(tasks, day, store.active_project_id, store.projects)

    lines = [f"Timesheet {day.isoformat()}:"]
    if not rows:
        lines.append("  (no time logged)")
    for r in rows:
        lines.append(f"  {r.project:<16} {r.task:<32} {r.status.value:<13} {format_duration(r.duration)}")
    if rows:
        lines.append(f"  {'Total':<63} {format_duration(total_for(rows))}")

    span = clock_in_out(tasks, day)
    if span is not None:
        lines.append(f"  First entry {span.first_entry:%H:%M}, last entry {span.last_entry:%H:%M}")

    review = store.get_daily_review(day)
    if review is not None:
        lines.append(f"  Review: {review.text}")
    return "\n".join(lines)


def cmd_backlog(state: AppState, args: list[str]) -> str:
    """
    /backlog               -> list items
    /backlog add <text>    -> add an item
    /backlog convert <id>  -> turn an item into a To Do task
    """
    store = state.store
    if not args:
        items = store.backlog_items
        pid = store.active_project_id
        items = [b for b in items if pid is None or b.project_id == pid]
        if not items:
            return "Backlog is empty."
        return "\n".join(["Backlog:"] + [f"  [{b.id}] {b.text}" for b in items])

    sub = args[0].lower()
    if sub == "add" and len(args) > 1:
        item = store.add_backlog_item(" ".join(args[1:]))
        return f"Backlog item added: [{item.id}] {item.text}"
    if sub == "convert" and len(args) == 2:
        task = store.convert_backlog_item(_int_arg(args[1]))
        return f"Converted to task [{task.id}] {task.title}"
    return "Usage: /backlog [add <text> | convert <id>]"


def cmd_review(state: AppState, args: list[str]) -> str:
    """/review <text> -> save today's review; /review week <text> -> this week's"""
    if args and args[0].lower() == "week":
        if len(args) < 2:
            return "Usage: /review week <text>"
        review = state.store.save_weekly_review(" ".join(args[1:]), date.today())
        return f"Weekly review saved (week of {review.week_start.isoformat()})."
    if not args:
        return "Usage: /review <text> | /review week <text>"
    review = state.store.save_daily_review(" ".join(args), date.today())
    return f"Review saved for {review.date.isoformat()}."


def cmd_clean(state: AppState, args: list[str]) -> str:
    removed = state.sweeper.run()
    return f"Removed {removed} old done task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage, filter and running timer.")
registry.register("projects", cmd_projects, help_text="List projects (* = active filter).")
registry.register("project", cmd_project, help_text="/project add <emoji> <name> | rm <id> | move <id> <index>.")
registry.register("use", cmd_use, help_text="Filter by project: /use <id> | /use all.")
registry.register("tasks", cmd_tasks, help_text="Show the board.", aliases=["board"])
registry.register("add", cmd_add, help_text="Add a task: /add [todo|doing|test|done] <title>.")
registry.register("move", cmd_move, help_text="Move a task: /move <id> <status> [after|before <id>].")
registry.register("start", cmd_start, help_text="Start a timer: /start <id>.")
registry.register("stop", cmd_stop, help_text="Stop a timer: /stop [id].")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <id>.")
registry.register("today", cmd_today, help_text="Timesheet for a day: /today [YYYY-MM-DD].")
registry.register("backlog", cmd_backlog, help_text="/backlog | /backlog add <text> | /backlog convert <id>.")
registry.register("review", cmd_review, help_text="Save a review: /review <text> | /review week <text>.")
registry.register("clean", cmd_clean, help_text="Remove done tasks past the retention window.")
