# src/tictac/board/retention.py

from __future__ import annotations

import logging

from ..core.errors import PersistenceFailure
from .store import TaskStore

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Purges stale Done tasks once, right after the board is loaded."""

    def __init__(self, store: TaskStore, retention_days: int = 5) -> None:
        self._store = store
        self.retention_days = max(0, int(retention_days))

    def run(self, now: int | None = None) -> int:
        """Returns how many tasks were removed (0 if the sweep could not be saved)."""
        try:
            removed = self._store.clean_old_done_tasks(now, retention_days=self.retention_days)
        except PersistenceFailure:
            logger.exception("Retention sweep could not be persisted; nothing removed.")
            return 0

        if removed:
            logger.info("Retention sweep removed %d done task(s) older than %d days", removed, self.retention_days)
        else:
            logger.debug("Retention sweep: nothing to remove")
        return removed
