# src/tictac/notify.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .core.ports import EventKind

logger = logging.getLogger(__name__)

_WARNING_KINDS = {EventKind.AUTO_STOPPED, EventKind.APPROACHING_LIMIT}


class LoggingNotifier:
    """Writes every board event to the log; timer-limit events at WARNING."""

    def __init__(self, name: str = "tictac.events") -> None:
        self._log = logging.getLogger(name)

    def notify(self, kind: EventKind, payload: dict[str, Any]) -> None:
        level = logging.WARNING if kind in _WARNING_KINDS else logging.DEBUG
        self._log.log(level, "event=%s payload=%s", kind.value, payload)


class CallbackNotifier:
    """
    Fans events out to callbacks, optionally filtered by kind.

    A failing callback is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[set[EventKind] | None, Callable[[EventKind, dict[str, Any]], None]]] = []

    def subscribe(
        self,
        callback: Callable[[EventKind, dict[str, Any]], None],
        kinds: set[EventKind] | None = None,
    ) -> None:
        self._subscribers.append((kinds, callback))

    def notify(self, kind: EventKind, payload: dict[str, Any]) -> None:
        for kinds, callback in self._subscribers:
            if kinds is not None and kind not in kinds:
                continue
            try:
                callback(kind, payload)
            except Exception:
                logger.exception("Event callback failed kind=%s", kind.value)
