# src/tictac/core/errors.py

from __future__ import annotations

from collections.abc import Sequence


class BoardError(Exception):
    """Base class for every error raised by the board core."""


class StorageError(BoardError):
    """Raised by storage backends when a load/save could not be completed."""


class NotFoundError(BoardError, LookupError):
    kind = "entity"

    def __init__(self, entity_id: int) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.kind} {entity_id} not found")


class TaskNotFound(NotFoundError):
    kind = "task"


class ProjectNotFound(NotFoundError):
    kind = "project"


class BacklogItemNotFound(NotFoundError):
    kind = "backlog item"


class PersistenceFailure(BoardError):
    """
    A store operation could not be persisted.

    The in-memory model has been restored to its pre-operation state;
    the backend error is chained as __cause__. Callers may retry.
    """


class PartialWriteError(PersistenceFailure):
    """
    A multi-collection operation persisted some collections but not all.

    The in-memory model is still fully restored, so the backend now holds
    collections newer than memory. Retrying the whole operation rewrites
    every touched collection and brings the two back in line.
    """

    def __init__(self, message: str, *, written: Sequence[str], failed: Sequence[str]) -> None:
        super().__init__(message)
        self.written = tuple(written)
        self.failed = tuple(failed)
