# src/tictac/storage/firebase.py

from __future__ import annotations

"""
Firebase Realtime Database backend over the plain REST API.

Only the database URL is needed: each collection lives at
    {database_url}/{root}/{collection}.json
and is read with GET and replaced with PUT.
"""

import logging
from typing import Any

import httpx

from ..core.errors import StorageError
from ..core.ports import Record, StorageBackend

logger = logging.getLogger(__name__)


def _as_list(data: Any) -> list[Record]:
    """
    Normalize a Firebase payload to a list.

    Firebase returns null for missing paths and may return an array with
    holes as an object keyed by index ({"0": {...}, "2": {...}}).
    """
    if data is None:
        return []
    if isinstance(data, list):
        return [x for x in data if x is not None]
    if isinstance(data, dict):
        try:
            keys = sorted(data, key=int)
        except ValueError:
            keys = list(data)
        return [data[k] for k in keys if data[k] is not None]
    return []


class FirebaseBackend:
    """
    StorageBackend for a Firebase Realtime Database.

    backup (optional): another backend that mirrors every successful load/save
    and serves loads while the remote is unreachable. A failed remote save
    raises StorageError and leaves the backup untouched.
    """

    def __init__(
        self,
        database_url: str,
        *,
        root: str = "timetracker",
        timeout: float = 10.0,
        backup: StorageBackend | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self.database_url = database_url.rstrip("/")
        self.root = root.strip("/")
        self._backup = backup
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout, connect=min(5.0, timeout)),
            headers={"Content-Type": "application/json"},
        )
        self.is_connected = False

    def close(self) -> None:
        self._client.close()

    def _url(self, collection: str) -> str:
        return f"{self.database_url}/{self.root}/{collection}.json"

    def check_connection(self) -> bool:
        """GET the database root; updates is_connected."""
        try:
            resp = self._client.get(f"{self.database_url}/.json", params={"shallow": "true"})
            self.is_connected = resp.is_success
        except httpx.HTTPError:
            logger.warning("Firebase connection check failed url=%s", self.database_url, exc_info=True)
            self.is_connected = False
        logger.info("Firebase connected=%s url=%s", self.is_connected, self.database_url)
        return self.is_connected

    def load(self, collection: str) -> list[Record]:
        url = self._url(collection)
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
            records = _as_list(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            self.is_connected = False
            if self._backup is not None:
                logger.warning("Firebase load failed for %s; using local backup", collection)
                return self._backup.load(collection)
            logger.error("Firebase load failed collection=%s: %s", collection, e)
            raise StorageError(f"firebase load failed for {collection}") from e

        self.is_connected = True
        if self._backup is not None:
            try:
                self._backup.save(collection, records)
            except StorageError:
                logger.warning("Could not refresh local backup for %s", collection, exc_info=True)
        logger.debug("Loaded collection=%s records=%d", collection, len(records))
        return records

    def save(self, collection: str, records: list[Record]) -> None:
        url = self._url(collection)
        try:
            resp = self._client.put(url, json=records)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            self.is_connected = False
            logger.error("Firebase save failed collection=%s: %s", collection, e)
            raise StorageError(f"firebase save failed for {collection}") from e

        self.is_connected = True
        # backup only mirrors what the remote accepted
        if self._backup is not None:
            try:
                self._backup.save(collection, records)
            except StorageError:
                logger.warning("Could not write local backup for %s", collection, exc_info=True)
        logger.debug("Saved collection=%s records=%d", collection, len(records))
