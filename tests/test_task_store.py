# tests/test_task_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from zenflow.core.models import Priority, Project, Tag, Task, TaskStatus, TimeLog, TimeLogType
from zenflow.errors import DuplicateKeyError, NotFoundError, TransactionError, ValidationError
from zenflow.store.sqlite_store import ZenStore


@pytest.mark.asyncio
async def test_add_get_list_delete(store: ZenStore, make_task) -> None:
    t1 = make_task(tags=["t1", "t3"], end_date=5_000, attachments=[{"id": "a1", "type": "link"}])
    t2 = make_task(priority=Priority.HIGH)
    await store.tasks.add(t1)
    await store.tasks.add(t2)

    assert await store.tasks.get(t1.id) == t1
    assert {t.id for t in await store.tasks.list()} == {t1.id, t2.id}
    assert await store.tasks.count() == 2

    await store.tasks.delete(t1.id)
    assert await store.tasks.get(t1.id) is None
    # deleting a missing id is a no-op
    await store.tasks.delete(t1.id)
    assert await store.tasks.count() == 1


@pytest.mark.asyncio
async def test_add_duplicate_id_fails(store: ZenStore, make_task) -> None:
    task = make_task()
    await store.tasks.add(task)
    with pytest.raises(DuplicateKeyError):
        await store.tasks.add(make_task(id=task.id, title="other"))
    assert (await store.tasks.get(task.id)).title == task.title


@pytest.mark.asyncio
async def test_add_rejects_blank_title(store: ZenStore, make_task) -> None:
    with pytest.raises(ValidationError):
        await store.tasks.add(make_task(title="   "))
    assert await store.tasks.count() == 0


@pytest.mark.asyncio
async def test_update_merges_fields(store: ZenStore, make_task) -> None:
    task = make_task(is_pinned=True, tags=["t2"])
    await store.tasks.add(task)

    updated = await store.tasks.update(task.id, status=TaskStatus.COMPLETED, updated_at=task.created_at + 1)
    assert updated.status == TaskStatus.COMPLETED
    assert updated.is_pinned is True
    assert updated.tags == ["t2"]
    assert await store.tasks.get(task.id) == updated


@pytest.mark.asyncio
async def test_update_coerces_enum_strings(store: ZenStore, make_task) -> None:
    task = make_task()
    await store.tasks.add(task)
    updated = await store.tasks.update(task.id, priority="HIGH")
    assert updated.priority is Priority.HIGH

    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, priority="urgent")


@pytest.mark.asyncio
async def test_update_missing_id_raises_not_found(store: ZenStore) -> None:
    with pytest.raises(NotFoundError):
        await store.tasks.update("nope", title="x")


@pytest.mark.asyncio
async def test_update_with_empty_title_keeps_stored_title(store: ZenStore, make_task) -> None:
    task = make_task(title="Buy milk")
    await store.tasks.add(task)

    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, title="")

    assert (await store.tasks.get(task.id)).title == "Buy milk"


@pytest.mark.asyncio
async def test_update_guards_timestamps_and_fields(store: ZenStore, make_task) -> None:
    task = make_task(created_at=10_000)
    await store.tasks.add(task)

    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, created_at=20_000)
    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, id="other")
    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, updated_at=9_999)
    with pytest.raises(ValidationError):
        await store.tasks.update(task.id, colour="red")

    assert await store.tasks.get(task.id) == task


@pytest.mark.asyncio
async def test_find_by_secondary_index(store: ZenStore, make_task) -> None:
    await store.tasks.add(make_task(project_id="p1"))
    await store.tasks.add(make_task(project_id="p2", status=TaskStatus.COMPLETED))
    await store.time_logs.add(TimeLog(id="l1", task_id="task-1", start_time=1, type=TimeLogType.FLOW))

    assert [t.project_id for t in await store.tasks.find_by("project_id", "p1")] == ["p1"]
    assert len(await store.tasks.find_by("status", TaskStatus.COMPLETED)) == 1
    assert [log.id for log in await store.time_logs.find_by("task_id", "task-1")] == ["l1"]

    with pytest.raises(ValidationError):
        await store.tasks.find_by("title", "Task 1")


@pytest.mark.asyncio
async def test_bulk_merge_upserts_only_given_records(store: ZenStore, make_task) -> None:
    keep = make_task(title="Keep me")
    target = make_task(title="Old title")
    await store.tasks.add(keep)
    await store.tasks.add(target)
    await store.seed()

    replacement = make_task(id=target.id, title="New title", created_at=target.created_at)
    fresh = make_task(title="Brand new")
    written = await store.bulk_merge(tasks=[replacement, fresh])

    assert written == {"tasks": 2}
    by_id = {t.id: t for t in await store.tasks.list()}
    assert by_id[keep.id] == keep
    assert by_id[target.id].title == "New title"
    assert by_id[fresh.id] == fresh
    # collections not mentioned are untouched
    assert await store.projects.count() == 3
    assert await store.tags.count() == 3


@pytest.mark.asyncio
async def test_bulk_merge_is_all_or_nothing(store: ZenStore, make_task) -> None:
    await store.seed()
    existing = make_task(title="Existing")
    await store.tasks.add(existing)

    with pytest.raises(TransactionError):
        await store.bulk_merge(
            projects=[Project(id="p9", name="Home", color="#fff")],
            tags=[Tag(id="t1", name="Renamed", color="#000")],
            tasks=[make_task(title="Fine")],
            # time logs are written last; this one fails validation
            time_logs=[TimeLog(id="bad", task_id="", start_time=1)],
        )

    assert await store.projects.get("p9") is None
    assert (await store.tags.get("t1")).name == "Urgent"
    assert [t.id for t in await store.tasks.list()] == [existing.id]


@pytest.mark.asyncio
async def test_bulk_merge_with_nothing_is_noop(store: ZenStore) -> None:
    assert await store.bulk_merge() == {}


@pytest.mark.asyncio
async def test_seed_is_idempotent(store: ZenStore) -> None:
    assert await store.seed() is True
    assert await store.seed() is False

    projects = {p.id: p.name for p in await store.projects.list()}
    tags = {t.id: t.name for t in await store.tags.list()}
    assert projects == {"p1": "Development", "p2": "Design", "p3": "Marketing"}
    assert tags == {"t1": "Urgent", "t2": "Bug", "t3": "Feature"}


@pytest.mark.asyncio
async def test_seed_skips_when_projects_exist(store: ZenStore) -> None:
    await store.projects.add(Project(id="mine", name="Mine", color="#123456"))
    assert await store.seed() is False
    assert await store.tags.count() == 0


@pytest.mark.asyncio
async def test_reset_all_clears_and_reseeds(store: ZenStore, make_task) -> None:
    await store.seed()
    await store.projects.add(Project(id="p9", name="Home", color="#fff"))
    await store.tasks.add(make_task())
    await store.time_logs.add(TimeLog(id="l1", task_id="task-1", start_time=1))

    await store.reset_all()

    counts = await store.counts()
    assert counts == {"tasks": 0, "projects": 3, "tags": 3, "time_logs": 0}
    assert await store.projects.get("p9") is None


@pytest.mark.asyncio
async def test_data_survives_reopen(tmp_path: Path, make_task) -> None:
    db = tmp_path / "z.sqlite3"
    task = make_task(is_pinned=True)
    await ZenStore(db).tasks.add(task)
    assert await ZenStore(db).tasks.get(task.id) == task


@pytest.mark.asyncio
async def test_schema_migration_adds_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute("CREATE TABLE tasks (id TEXT PRIMARY KEY, title TEXT NOT NULL, created_at INTEGER NOT NULL)")
    conn.execute("INSERT INTO tasks (id, title, created_at) VALUES ('old', 'Legacy', 7)")
    conn.commit()
    conn.close()

    store = ZenStore(db)
    legacy = await store.tasks.get("old")
    assert legacy is not None
    assert legacy.title == "Legacy"
    assert legacy.priority == Priority.MEDIUM
    assert legacy.is_pinned is False

    await store.tasks.update("old", is_pinned=True)
    assert (await store.tasks.get("old")).is_pinned is True
