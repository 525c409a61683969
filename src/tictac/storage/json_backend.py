# src/tictac/storage/json_backend.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.errors import StorageError
from ..core.ports import Record

logger = logging.getLogger(__name__)


class JsonFileBackend:
    """One <collection>.json file per collection, written atomically (tmp + os.replace)."""

    def __init__(self, data_dir: str | Path) -> None:
        self._dir = Path(data_dir)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, collection: str) -> Path:
        if not collection or "/" in collection or "\\" in collection or ".." in collection:
            raise StorageError(f"invalid collection name: {collection!r}")
        return self._dir / f"{collection}.json"

    def load(self, collection: str) -> list[Record]:
        path = self._path(collection)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text("utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.exception("Failed to read %s", path)
            raise StorageError(f"could not read {path}") from e
        return data if isinstance(data, list) else []

    def save(self, collection: str, records: list[Record]) -> None:
        path = self._path(collection)
        try:
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(records, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            logger.exception("Failed to write %s", path)
            raise StorageError(f"could not write {path}") from e
        with contextlib.suppress(Exception):
            # Best-effort: time logs are personal data, keep the file private on disk.
            os.chmod(path, 0o600)
        logger.debug("Saved %d records to %s", len(records), path)
