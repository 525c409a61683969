# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tictac.core.ports import EventKind


@dataclass(slots=True)
class RecordingNotifier:
    """
    Notifier that records every event for assertions.
    """

    events: list[tuple[EventKind, dict[str, Any]]] = field(default_factory=list)

    def notify(self, kind: EventKind, payload: dict[str, Any]) -> None:
        self.events.append((kind, payload))

    def kinds(self) -> list[EventKind]:
        return [k for k, _ in self.events]

    def of(self, kind: EventKind) -> list[dict[str, Any]]:
        return [p for k, p in self.events if k == kind]


class ExplodingNotifier:
    def notify(self, kind: EventKind, payload: dict[str, Any]) -> None:
        raise RuntimeError("toast service down")


class FakeClock:
    """
    Deterministic epoch-millisecond clock.

    Each call returns the current value; advance() moves it forward.
    """

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, *, seconds: float = 0, ms: int = 0) -> int:
        self.now += int(seconds * 1000) + ms
        return self.now
