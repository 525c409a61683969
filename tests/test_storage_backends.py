# tests/test_storage_backends.py

from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import httpx
import pytest

from tictac.board.store import TaskStore
from tictac.core.errors import PersistenceFailure, StorageError
from tictac.core.ports import TASKS
from tictac.storage.firebase import FirebaseBackend, _as_list
from tictac.storage.json_backend import JsonFileBackend
from tictac.storage.memory import InMemoryBackend
from tictac.storage.sqlite_backend import SQLiteBackend

RECORDS = [{"id": 1, "title": "ünïcode ✓", "timeEntries": [{"date": 1, "duration": 2.5}]}]


def test_sqlite_round_trip_and_overwrite(tmp_path: Path) -> None:
    db = SQLiteBackend(tmp_path / "nested" / "board.sqlite3")

    assert db.load(TASKS) == []
    db.save(TASKS, RECORDS)
    db.save(TASKS, RECORDS + [{"id": 2}])

    reopened = SQLiteBackend(tmp_path / "nested" / "board.sqlite3")
    assert reopened.load(TASKS) == RECORDS + [{"id": 2}]


def test_json_backend_round_trip(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path / "data")

    assert backend.load(TASKS) == []
    backend.save(TASKS, RECORDS)

    path = tmp_path / "data" / "tasks.json"
    assert json.loads(path.read_text("utf-8")) == RECORDS
    assert backend.load(TASKS) == RECORDS
    assert not (tmp_path / "data" / "tasks.tmp").exists()
    if os.name == "posix":
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_json_backend_rejects_path_names(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path)
    with pytest.raises(StorageError):
        backend.save("../escape", [])


def test_json_backend_corrupt_file(tmp_path: Path) -> None:
    (tmp_path / "tasks.json").write_text("{not json", "utf-8")
    with pytest.raises(StorageError):
        JsonFileBackend(tmp_path).load(TASKS)


def test_store_survives_restart_on_sqlite(tmp_path: Path) -> None:
    path = tmp_path / "board.sqlite3"
    first = TaskStore(SQLiteBackend(path))
    first.load()
    project = first.create_project("Alpha", "🎯")
    task = first.create_task("persisted", project_id=project.id)
    first.start_timer(task.id, now=0)

    second = TaskStore(SQLiteBackend(path))
    second.load()

    assert [p.name for p in second.projects] == ["Alpha"]
    assert second.get_task(task.id).project_id == project.id
    assert second.active_task_id == task.id


# ---- firebase ----


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (None, []),
        ([{"id": 1}, None, {"id": 2}], [{"id": 1}, {"id": 2}]),
        ({"2": {"id": 2}, "0": {"id": 0}, "10": {"id": 10}}, [{"id": 0}, {"id": 2}, {"id": 10}]),
        ("garbage", []),
    ],
)
def test_as_list(payload, expected) -> None:
    assert _as_list(payload) == expected


class FakeFirebase:
    """Serves /timetracker/<collection>.json from a dict via httpx.MockTransport."""

    def __init__(self) -> None:
        self.data: dict[str, object] = {}
        self.down = False
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            return httpx.Response(503, json={"error": "unavailable"})
        path = request.url.path
        if path == "/.json":
            return httpx.Response(200, json={"timetracker": True})
        collection = path.removeprefix("/timetracker/").removesuffix(".json")
        if request.method == "GET":
            # missing paths come back as a literal null body
            return httpx.Response(200, content=json.dumps(self.data.get(collection)).encode())
        if request.method == "PUT":
            self.data[collection] = json.loads(request.content)
            return httpx.Response(200, json=self.data[collection])
        return httpx.Response(405)

    def backend(self, **kwargs) -> FirebaseBackend:
        client = httpx.Client(transport=httpx.MockTransport(self.handler))
        return FirebaseBackend("https://example-db.firebaseio.com/", client=client, **kwargs)


def test_firebase_load_and_save() -> None:
    remote = FakeFirebase()
    backend = remote.backend()

    assert backend.load(TASKS) == []
    backend.save(TASKS, RECORDS)

    assert remote.data[TASKS] == RECORDS
    assert backend.load(TASKS) == RECORDS
    assert backend.is_connected
    put = next(r for r in remote.requests if r.method == "PUT")
    assert str(put.url) == "https://example-db.firebaseio.com/timetracker/tasks.json"


def test_firebase_check_connection() -> None:
    remote = FakeFirebase()
    backend = remote.backend()

    assert backend.check_connection() is True
    assert remote.requests[0].url.params["shallow"] == "true"

    remote.down = True
    assert backend.check_connection() is False


def test_firebase_errors_raise_storage_error() -> None:
    remote = FakeFirebase()
    remote.down = True
    backend = remote.backend()

    with pytest.raises(StorageError):
        backend.load(TASKS)
    with pytest.raises(StorageError):
        backend.save(TASKS, RECORDS)
    assert not backend.is_connected


def test_firebase_backup_serves_loads_while_offline() -> None:
    remote = FakeFirebase()
    backup = InMemoryBackend()
    backend = remote.backend(backup=backup)

    backend.save(TASKS, RECORDS)
    assert backup.data[TASKS] == RECORDS

    remote.down = True
    assert backend.load(TASKS) == RECORDS

    with pytest.raises(StorageError):
        backend.save(TASKS, [])
    assert backup.data[TASKS] == RECORDS


def test_firebase_load_refreshes_backup() -> None:
    remote = FakeFirebase()
    remote.data[TASKS] = RECORDS
    backup = InMemoryBackend()

    remote.backend(backup=backup).load(TASKS)

    assert backup.data[TASKS] == RECORDS


def test_store_rolls_back_when_firebase_is_down() -> None:
    remote = FakeFirebase()
    store = TaskStore(remote.backend())
    store.load()
    task = store.create_task("t")

    remote.down = True
    with pytest.raises(PersistenceFailure):
        store.start_timer(task.id)

    assert store.active_task_id is None
    assert remote.data[TASKS][0]["isTimerRunning"] is False


def test_firebase_requires_url() -> None:
    with pytest.raises(ValueError):
        FirebaseBackend("")
