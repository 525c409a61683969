"""Personal kanban board with per-task stopwatch timers and timesheets."""

__version__ = "0.1.0"
