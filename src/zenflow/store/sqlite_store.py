# src/zenflow/store/sqlite_store.py

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import json
import logging
import sqlite3
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from ..core.models import (
    DEFAULT_PROJECTS,
    DEFAULT_TAGS,
    Priority,
    Project,
    Tag,
    Task,
    TaskStatus,
    TimeLog,
    TimeLogType,
)
from ..errors import DuplicateKeyError, NotFoundError, TransactionError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E")


# ---- row mapping ----


def _json_dumps(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def _json_loads(s: str | None, default: Any) -> Any:
    if not s:
        return default
    try:
        return json.loads(s)
    except ValueError:
        logger.warning("Undecodable JSON column value; using %r", default)
        return default


def _opt_int(v: Any) -> int | None:
    return int(v) if v is not None else None


def _task_to_row(t: Task) -> dict[str, Any]:
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "parent_id": t.parent_id,
        "project_id": t.project_id,
        "status": t.status.value,
        "priority": t.priority.value,
        "tags": _json_dumps(list(t.tags)),
        "start_date": t.start_date,
        "end_date": t.end_date,
        "due_date": t.due_date,
        "estimated_minutes": t.estimated_minutes,
        "created_at": t.created_at,
        "updated_at": t.updated_at,
        "is_pinned": 1 if t.is_pinned else 0,
        "attachments": _json_dumps(t.attachments),
    }


def _row_to_task(row: sqlite3.Row) -> Task:
    tags = _json_loads(row["tags"], [])
    return Task(
        id=str(row["id"]),
        title=str(row["title"] or ""),
        description=row["description"],
        parent_id=row["parent_id"],
        project_id=row["project_id"],
        status=TaskStatus.from_db(row["status"]),
        priority=Priority.from_db(row["priority"]),
        tags=[str(x) for x in tags] if isinstance(tags, list) else [],
        start_date=_opt_int(row["start_date"]),
        end_date=_opt_int(row["end_date"]),
        due_date=_opt_int(row["due_date"]),
        estimated_minutes=_opt_int(row["estimated_minutes"]),
        created_at=int(row["created_at"] or 0),
        updated_at=_opt_int(row["updated_at"]),
        is_pinned=bool(row["is_pinned"]),
        attachments=_json_loads(row["attachments"], None),
    )


def _project_to_row(p: Project) -> dict[str, Any]:
    return {"id": p.id, "name": p.name, "color": p.color, "icon": p.icon}


def _row_to_project(row: sqlite3.Row) -> Project:
    return Project(id=str(row["id"]), name=str(row["name"]), color=str(row["color"]), icon=row["icon"])


def _tag_to_row(t: Tag) -> dict[str, Any]:
    return {"id": t.id, "name": t.name, "color": t.color}


def _row_to_tag(row: sqlite3.Row) -> Tag:
    return Tag(id=str(row["id"]), name=str(row["name"]), color=str(row["color"]))


def _log_to_row(log: TimeLog) -> dict[str, Any]:
    return {
        "id": log.id,
        "task_id": log.task_id,
        "start_time": log.start_time,
        "end_time": log.end_time,
        "duration_seconds": log.duration_seconds,
        "type": log.type.value,
    }


def _row_to_log(row: sqlite3.Row) -> TimeLog:
    return TimeLog(
        id=str(row["id"]),
        task_id=str(row["task_id"]),
        start_time=int(row["start_time"] or 0),
        end_time=_opt_int(row["end_time"]),
        duration_seconds=int(row["duration_seconds"] or 0),
        type=TimeLogType.from_db(row["type"]),
    )


# ---- validation (runs before any write) ----


def _require_id(entity_id: Any) -> None:
    if not isinstance(entity_id, str) or not entity_id.strip():
        raise ValidationError("id must be a non-empty string", field="id")


def _enum(enum_cls: type, value: Any, field: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError as e:
        raise ValidationError(f"invalid {field}: {value!r}", field=field) from e


def _normalize_task(t: Task) -> Task:
    _require_id(t.id)
    if not isinstance(t.title, str) or not t.title.strip():
        raise ValidationError("title must not be empty", field="title")
    if t.updated_at is not None and t.updated_at < t.created_at:
        raise ValidationError("updatedAt must not precede createdAt", field="updated_at")
    return dataclasses.replace(
        t,
        status=_enum(TaskStatus, t.status, "status"),
        priority=_enum(Priority, t.priority, "priority"),
        tags=list(t.tags or []),
        is_pinned=bool(t.is_pinned),
    )


def _normalize_project(p: Project) -> Project:
    _require_id(p.id)
    return p


def _normalize_tag(t: Tag) -> Tag:
    _require_id(t.id)
    return t


def _normalize_log(log: TimeLog) -> TimeLog:
    _require_id(log.id)
    if not log.task_id:
        raise ValidationError("taskId is required", field="task_id")
    return dataclasses.replace(log, type=_enum(TimeLogType, log.type, "type"))


@dataclass(frozen=True, slots=True)
class _Table(Generic[E]):
    name: str
    entity_type: type
    columns: tuple[tuple[str, str], ...]
    indexes: tuple[str, ...]
    to_row: Callable[[E], dict[str, Any]]
    from_row: Callable[[sqlite3.Row], E]
    normalize: Callable[[E], E]
    immutable: frozenset[str] = frozenset({"id"})

    @property
    def column_names(self) -> list[str]:
        return [c for c, _ in self.columns]

    def insert_sql(self, verb: str = "INSERT") -> str:
        cols = self.column_names
        return (
            f"{verb} INTO {self.name} ({', '.join(cols)}) "
            f"VALUES ({', '.join('?' for _ in cols)})"
        )

    def params(self, entity: E) -> list[Any]:
        row = self.to_row(entity)
        return [row[c] for c in self.column_names]


TASKS: _Table[Task] = _Table(
    name="tasks",
    entity_type=Task,
    columns=(
        ("id", "TEXT PRIMARY KEY"),
        ("title", "TEXT NOT NULL DEFAULT ''"),
        ("description", "TEXT"),
        ("parent_id", "TEXT"),
        ("project_id", "TEXT"),
        ("status", "TEXT NOT NULL DEFAULT 'TODO'"),
        ("priority", "TEXT NOT NULL DEFAULT 'MEDIUM'"),
        ("tags", "TEXT NOT NULL DEFAULT '[]'"),
        ("start_date", "INTEGER"),
        ("end_date", "INTEGER"),
        ("due_date", "INTEGER"),
        ("estimated_minutes", "INTEGER"),
        ("created_at", "INTEGER NOT NULL DEFAULT 0"),
        ("updated_at", "INTEGER"),
        ("is_pinned", "INTEGER NOT NULL DEFAULT 0"),
        ("attachments", "TEXT"),
    ),
    indexes=("parent_id", "project_id", "status", "created_at"),
    to_row=_task_to_row,
    from_row=_row_to_task,
    normalize=_normalize_task,
    immutable=frozenset({"id", "created_at"}),
)

PROJECTS: _Table[Project] = _Table(
    name="projects",
    entity_type=Project,
    columns=(
        ("id", "TEXT PRIMARY KEY"),
        ("name", "TEXT NOT NULL DEFAULT ''"),
        ("color", "TEXT NOT NULL DEFAULT ''"),
        ("icon", "TEXT"),
    ),
    indexes=("name",),
    to_row=_project_to_row,
    from_row=_row_to_project,
    normalize=_normalize_project,
)

TAGS: _Table[Tag] = _Table(
    name="tags",
    entity_type=Tag,
    columns=(
        ("id", "TEXT PRIMARY KEY"),
        ("name", "TEXT NOT NULL DEFAULT ''"),
        ("color", "TEXT NOT NULL DEFAULT ''"),
    ),
    indexes=("name",),
    to_row=_tag_to_row,
    from_row=_row_to_tag,
    normalize=_normalize_tag,
)

TIME_LOGS: _Table[TimeLog] = _Table(
    name="time_logs",
    entity_type=TimeLog,
    columns=(
        ("id", "TEXT PRIMARY KEY"),
        ("task_id", "TEXT NOT NULL DEFAULT ''"),
        ("start_time", "INTEGER NOT NULL DEFAULT 0"),
        ("end_time", "INTEGER"),
        ("duration_seconds", "INTEGER NOT NULL DEFAULT 0"),
        ("type", "TEXT NOT NULL DEFAULT 'MANUAL'"),
    ),
    indexes=("task_id", "start_time", "type"),
    to_row=_log_to_row,
    from_row=_row_to_log,
    normalize=_normalize_log,
)

ALL_TABLES: tuple[_Table[Any], ...] = (TASKS, PROJECTS, TAGS, TIME_LOGS)


class Collection(Generic[E]):
    """
    One keyed collection (table) of the store.

    Public methods are coroutines; the SQLite work runs in a worker thread.
    """

    def __init__(self, store: ZenStore, table: _Table[E]) -> None:
        self._store = store
        self._table = table

    @property
    def name(self) -> str:
        return self._table.name

    # ---- sync implementations ----

    def _add_sync(self, entity: E) -> None:
        entity = self._table.normalize(entity)
        conn = self._store._get_conn()
        try:
            try:
                conn.execute(self._table.insert_sql(), self._table.params(entity))
            except sqlite3.IntegrityError as e:
                raise DuplicateKeyError(self.name, getattr(entity, "id")) from e
            conn.commit()
        finally:
            conn.close()
        logger.debug("%s: added id=%s", self.name, getattr(entity, "id"))

    def _get_sync(self, entity_id: str) -> E | None:
        conn = self._store._get_conn()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.name} WHERE id = ?", (entity_id,)
            ).fetchone()
            return self._table.from_row(row) if row else None
        finally:
            conn.close()

    def _update_sync(self, entity_id: str, fields: dict[str, Any]) -> E:
        allowed = {f.name for f in dataclasses.fields(self._table.entity_type)}
        unknown = sorted(set(fields) - allowed)
        if unknown:
            raise ValidationError(f"{self.name}: unknown field(s) {', '.join(unknown)}")

        conn = self._store._get_conn()
        try:
            row = conn.execute(
                f"SELECT * FROM {self.name} WHERE id = ?", (entity_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(self.name, entity_id)

            current = self._table.from_row(row)
            for name in self._table.immutable:
                if name in fields and fields[name] != getattr(current, name):
                    raise ValidationError(f"{self.name}: {name} is immutable", field=name)

            merged = self._table.normalize(dataclasses.replace(current, **fields))
            cols = [c for c in self._table.column_names if c != "id"]
            values = self._table.to_row(merged)
            conn.execute(
                f"UPDATE {self.name} SET {', '.join(f'{c} = ?' for c in cols)} WHERE id = ?",
                [*(values[c] for c in cols), entity_id],
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("%s: updated id=%s fields=%s", self.name, entity_id, sorted(fields))
        return merged

    def _delete_sync(self, entity_id: str) -> None:
        conn = self._store._get_conn()
        try:
            cur = conn.execute(f"DELETE FROM {self.name} WHERE id = ?", (entity_id,))
            conn.commit()
            logger.debug("%s: delete id=%s removed=%s", self.name, entity_id, cur.rowcount)
        finally:
            conn.close()

    def _list_sync(self) -> list[E]:
        conn = self._store._get_conn()
        try:
            rows = conn.execute(f"SELECT * FROM {self.name}").fetchall()
            return [self._table.from_row(r) for r in rows]
        finally:
            conn.close()

    def _find_by_sync(self, field: str, value: Any) -> list[E]:
        if field not in self._table.indexes:
            raise ValidationError(f"{self.name}: no index on {field!r}", field=field)
        conn = self._store._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM {self.name} WHERE {field} = ?", (value,)
            ).fetchall()
            return [self._table.from_row(r) for r in rows]
        finally:
            conn.close()

    def _count_sync(self) -> int:
        conn = self._store._get_conn()
        try:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM {self.name}").fetchone()
            return int(n)
        finally:
            conn.close()

    # ---- public API ----

    async def add(self, entity: E) -> None:
        """Insert a new record. Raises DuplicateKeyError if the id exists."""
        await asyncio.to_thread(self._add_sync, entity)

    async def get(self, entity_id: str) -> E | None:
        return await asyncio.to_thread(self._get_sync, entity_id)

    async def update(self, entity_id: str, **fields: Any) -> E:
        """
        Merge `fields` (attribute names) into the stored record and return it.

        Raises NotFoundError if no record has this id, ValidationError if the
        merged record is invalid; the stored record is unchanged in both cases.
        """
        return await asyncio.to_thread(self._update_sync, entity_id, fields)

    async def delete(self, entity_id: str) -> None:
        """Remove the record; no-op if absent."""
        await asyncio.to_thread(self._delete_sync, entity_id)

    async def list(self) -> list[E]:
        return await asyncio.to_thread(self._list_sync)

    async def find_by(self, field: str, value: Any) -> list[E]:
        """Lookup through one of the collection's secondary indexes."""
        if isinstance(value, (TaskStatus, Priority, TimeLogType)):
            value = value.value
        return await asyncio.to_thread(self._find_by_sync, field, value)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count_sync)


class ZenStore:
    """
    SQLite store for tasks, projects, tags and time logs.

    The schema is migration-safe:
    - create tables if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Concurrency:
    - each call opens its own SQLite connection
    - only bulk_merge() and reset_all() span several tables atomically
    """

    def __init__(self, db_path: str | Path = "zenflow.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

        self.tasks: Collection[Task] = Collection(self, TASKS)
        self.projects: Collection[Project] = Collection(self, PROJECTS)
        self.tags: Collection[Tag] = Collection(self, TAGS)
        self.time_logs: Collection[TimeLog] = Collection(self, TIME_LOGS)

        logger.info("ZenStore ready db=%s", self._db_path)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            for table in ALL_TABLES:
                cols_sql = ",\n    ".join(f"{c} {decl}" for c, decl in table.columns)
                cur.execute(f"CREATE TABLE IF NOT EXISTS {table.name} (\n    {cols_sql}\n)")

                # Migrations (safe): add missing columns.
                cur.execute(f"PRAGMA table_info({table.name})")
                existing = {row["name"] for row in cur.fetchall()}
                for name, decl in table.columns:
                    if name in existing:
                        continue
                    cur.execute(f"ALTER TABLE {table.name} ADD COLUMN {name} {decl}")
                    logger.info("ZenStore migration: added column %s.%s", table.name, name)

                for col in table.indexes:
                    cur.execute(
                        f"CREATE INDEX IF NOT EXISTS idx_{table.name}_{col} ON {table.name}({col})"
                    )
            conn.commit()
        finally:
            conn.close()

    # ---- multi-collection operations ----

    def _bulk_merge_sync(self, batches: list[tuple[_Table[Any], Sequence[Any]]]) -> dict[str, int]:
        conn = self._get_conn()
        try:
            written: dict[str, int] = {}
            try:
                for table, records in batches:
                    rows = [table.params(table.normalize(r)) for r in records]
                    conn.executemany(table.insert_sql("INSERT OR REPLACE"), rows)
                    written[table.name] = len(rows)
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.warning("bulk_merge aborted, rolled back: %s", e)
                raise TransactionError(f"bulk merge aborted: {e}") from e
            return written
        finally:
            conn.close()

    async def bulk_merge(
        self,
        *,
        tasks: Sequence[Task] | None = None,
        projects: Sequence[Project] | None = None,
        tags: Sequence[Tag] | None = None,
        time_logs: Sequence[TimeLog] | None = None,
    ) -> dict[str, int]:
        """
        Upsert every given record by id, all collections in one transaction.

        Omitted (None) collections are left untouched. Either everything is
        applied or nothing is (TransactionError). Returns rows written per table.
        """
        batches: list[tuple[_Table[Any], Sequence[Any]]] = [
            (table, records)
            for table, records in (
                (TASKS, tasks),
                (PROJECTS, projects),
                (TAGS, tags),
                (TIME_LOGS, time_logs),
            )
            if records is not None
        ]
        if not batches:
            return {}
        written = await asyncio.to_thread(self._bulk_merge_sync, batches)
        logger.info("bulk_merge applied %s", written)
        return written

    def _seed_sync(self) -> bool:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM projects").fetchone()
            if int(n) > 0:
                return False
            conn.executemany(PROJECTS.insert_sql(), [PROJECTS.params(p) for p in DEFAULT_PROJECTS])
            conn.executemany(TAGS.insert_sql("INSERT OR IGNORE"), [TAGS.params(t) for t in DEFAULT_TAGS])
            conn.commit()
            return True
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    async def seed(self) -> bool:
        """
        Populate default projects and tags if there are no projects yet.

        Safe to call on every startup. Returns True if anything was inserted.
        """
        seeded = await asyncio.to_thread(self._seed_sync)
        if seeded:
            logger.info("Seeded %d projects and %d tags", len(DEFAULT_PROJECTS), len(DEFAULT_TAGS))
        return seeded

    def _clear_sync(self) -> None:
        conn = self._get_conn()
        try:
            try:
                for table in ALL_TABLES:
                    conn.execute(f"DELETE FROM {table.name}")
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise TransactionError(f"reset aborted: {e}") from e
        finally:
            conn.close()

    async def reset_all(self) -> None:
        """Delete every record in every collection, then seed(). Irreversible."""
        await asyncio.to_thread(self._clear_sync)
        logger.warning("All collections cleared")
        await self.seed()

    async def counts(self) -> dict[str, int]:
        return {
            "tasks": await self.tasks.count(),
            "projects": await self.projects.count(),
            "tags": await self.tags.count(),
            "time_logs": await self.time_logs.count(),
        }
