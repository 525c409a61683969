# src/tictac/storage/memory.py

from __future__ import annotations

import copy

from ..core.errors import StorageError
from ..core.ports import Record


class InMemoryBackend:
    """
    Dict-backed StorageBackend for demos and tests.

    fail_on_save / fail_on_load: collection names whose saves / loads raise StorageError.
    """

    def __init__(self, initial: dict[str, list[Record]] | None = None) -> None:
        self.data: dict[str, list[Record]] = copy.deepcopy(initial or {})
        self.fail_on_save: set[str] = set()
        self.fail_on_load: set[str] = set()
        self.saves: list[str] = []

    def load(self, collection: str) -> list[Record]:
        if collection in self.fail_on_load:
            raise StorageError(f"simulated load failure for {collection}")
        return copy.deepcopy(self.data.get(collection, []))

    def save(self, collection: str, records: list[Record]) -> None:
        if collection in self.fail_on_save:
            raise StorageError(f"simulated save failure for {collection}")
        self.data[collection] = copy.deepcopy(records)
        self.saves.append(collection)
