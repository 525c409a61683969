"""
Board core.

Components:
- models.py: data structures (Project, Task, TimeEntry, BacklogItem, reviews, TaskStatus)
- positions.py: fractional positions for manual ordering
- timer.py: single-active-timer state machine with auto-stop policy
- store.py: TaskStore, the authoritative in-memory board backed by a StorageBackend
- timesheet.py: pure per-day / per-range reporting helpers
- retention.py: one-shot sweep of stale Done tasks
- watchdog.py: polling loop enforcing the auto-stop policy
"""
