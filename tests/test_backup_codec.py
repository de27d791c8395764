# tests/test_backup_codec.py

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from zenflow.backup.codec import BackupCodec, backup_filename, dumps
from zenflow.core.models import Priority, Task, TaskStatus, TimeLog, TimeLogType
from zenflow.errors import ParseError
from zenflow.store.sqlite_store import ZenStore


async def _populate(store: ZenStore, make_task) -> None:
    await store.seed()
    await store.tasks.add(make_task(title="Write report", priority=Priority.HIGH, end_date=9_000))
    await store.tasks.add(make_task(title="Done already", status=TaskStatus.COMPLETED, is_pinned=True))
    await store.time_logs.add(
        TimeLog(id="l1", task_id="task-1", start_time=100, end_time=1_100, duration_seconds=1)
    )


def _by_id(items) -> dict:
    return {i.id: i for i in items}


@pytest.mark.asyncio
async def test_export_document_shape(store: ZenStore, make_task) -> None:
    await _populate(store, make_task)
    doc = await BackupCodec(store).export_backup()

    assert doc["version"] == 1
    assert datetime.fromisoformat(doc["exportedAt"]).tzinfo is not None
    assert set(doc) == {"version", "exportedAt", "tasks", "projects", "tags", "logs"}
    assert len(doc["tasks"]) == 2
    assert len(doc["projects"]) == 3
    assert len(doc["tags"]) == 3
    assert doc["logs"][0]["taskId"] == "task-1"
    # plain JSON values only
    json.loads(dumps(doc))


@pytest.mark.asyncio
async def test_round_trip_into_empty_store(tmp_path: Path, store: ZenStore, make_task) -> None:
    await _populate(store, make_task)
    text = dumps(await BackupCodec(store).export_backup())

    target = ZenStore(tmp_path / "restored.sqlite3")
    written = await BackupCodec(target).import_backup(text)

    assert written == {"tasks": 2, "projects": 3, "tags": 3, "time_logs": 1}
    assert _by_id(await target.tasks.list()) == _by_id(await store.tasks.list())
    assert _by_id(await target.projects.list()) == _by_id(await store.projects.list())
    assert _by_id(await target.tags.list()) == _by_id(await store.tags.list())
    assert _by_id(await target.time_logs.list()) == _by_id(await store.time_logs.list())


@pytest.mark.asyncio
async def test_import_merges_and_leaves_missing_keys_alone(store: ZenStore, make_task) -> None:
    await _populate(store, make_task)
    doc = {
        "version": 1,
        "tasks": [
            {"id": "task-1", "title": "Write report v2", "createdAt": 1_000, "status": "TODO"},
            {"id": "imported", "title": "From backup", "createdAt": 50, "priority": "LOW"},
        ],
    }

    written = await BackupCodec(store).import_backup(doc)

    assert written == {"tasks": 2}
    tasks = _by_id(await store.tasks.list())
    assert tasks["task-1"].title == "Write report v2"
    # full replace: fields absent from the record are gone
    assert tasks["task-1"].end_date is None
    assert tasks["task-2"].title == "Done already"
    assert tasks["imported"].priority == Priority.LOW
    assert await store.projects.count() == 3
    assert await store.time_logs.count() == 1


@pytest.mark.asyncio
async def test_import_accepts_bytes_and_logs_key(store: ZenStore) -> None:
    payload = json.dumps(
        {"logs": [{"id": "l9", "taskId": "gone", "startTime": 5, "durationSeconds": 0, "type": "MANUAL"}]}
    ).encode("utf-8")
    written = await BackupCodec(store).import_backup(payload)
    assert written == {"time_logs": 1}
    log = await store.time_logs.get("l9")
    assert log is not None and log.type == TimeLogType.MANUAL


@pytest.mark.asyncio
async def test_import_document_without_collections_changes_nothing(store: ZenStore) -> None:
    assert await BackupCodec(store).import_backup('{"version": 1}') == {}
    assert await store.counts() == {"tasks": 0, "projects": 0, "tags": 0, "time_logs": 0}


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1, 2, 3]",
        '"just a string"',
        '{"tasks": {"id": "x"}}',
        '{"tasks": [{"id": "x", "title": "no createdAt"}]}',
        '{"projects": [{"name": "no id", "color": "#000"}]}',
        b"\xff\xfe",
        '{"tasks": [{"id": "a", "title": "x", "createdAt": Infinity}]}',
        '{"tasks": [{"id": "a", "title": "x", "createdAt": 1, "isPinned": "false"}]}',
    ],
)
@pytest.mark.asyncio
async def test_import_rejects_malformed_input(store: ZenStore, make_task, raw) -> None:
    await store.tasks.add(make_task())
    with pytest.raises(ParseError):
        await BackupCodec(store).import_backup(raw)
    assert await store.tasks.count() == 1


@pytest.mark.asyncio
async def test_bad_record_in_one_section_blocks_whole_import(store: ZenStore) -> None:
    doc = {
        "projects": [{"id": "p9", "name": "Home", "color": "#fff"}],
        "logs": [{"id": "l1", "startTime": 1}],
    }
    with pytest.raises(ParseError):
        await BackupCodec(store).import_backup(doc)
    assert await store.projects.count() == 0


def test_backup_filename() -> None:
    when = datetime(2026, 3, 7, 23, 30, tzinfo=timezone.utc)
    assert backup_filename("zenflow", when) == "zenflow-backup-2026-03-07.json"


@pytest.mark.asyncio
async def test_write_and_read_backup_file(tmp_path: Path, store: ZenStore, make_task) -> None:
    await _populate(store, make_task)
    when = datetime(2026, 1, 2, tzinfo=timezone.utc)
    path = await BackupCodec(store, app_name="zen").write_backup(tmp_path / "out", when)

    assert path.name == "zen-backup-2026-01-02.json"
    assert json.loads(path.read_text("utf-8"))["version"] == 1

    target = ZenStore(tmp_path / "other.sqlite3")
    await BackupCodec(target).read_backup(path)
    assert {t.title for t in await target.tasks.list()} == {"Write report", "Done already"}
