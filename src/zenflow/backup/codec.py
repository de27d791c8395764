# src/zenflow/backup/codec.py

"""
Backup codec: versioned JSON snapshot of every collection.

Document shape (UTF-8 JSON object):
    {
      "version": 1,
      "exportedAt": "<ISO-8601>",
      "tasks": [...], "projects": [...], "tags": [...],
      "logs": [...]            # time logs
    }

Import always merges (upsert by id). Arrays missing from the document leave the
matching collection untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..core.models import Project, Tag, Task, TimeLog
from ..core.ports import TaskRepo
from ..errors import ParseError

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# document key -> (bulk_merge keyword, decoder)
_SECTIONS: tuple[tuple[str, str, Callable[[dict[str, Any]], Any]], ...] = (
    ("tasks", "tasks", Task.from_dict),
    ("projects", "projects", Project.from_dict),
    ("tags", "tags", Tag.from_dict),
    ("logs", "time_logs", TimeLog.from_dict),
)


def backup_filename(app_name: str = "zenflow", when: datetime | None = None) -> str:
    """`<app-name>-backup-YYYY-MM-DD.json` (UTC date)."""
    when = when or datetime.now(timezone.utc)
    return f"{app_name}-backup-{when.strftime('%Y-%m-%d')}.json"


def dumps(document: dict[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2)


def parse_document(raw: str | bytes | dict[str, Any]) -> dict[str, Any]:
    """Accept JSON text/bytes or an already-parsed mapping; return the mapping."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"backup is not valid UTF-8: {e}") from e

    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ParseError(f"backup is not valid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, dict):
        raise ParseError("backup document must be a JSON object")
    return data


def decode_sections(document: dict[str, Any]) -> dict[str, list[Any]]:
    """
    Decode every present array into entities, keyed by bulk_merge keyword.

    Raises ParseError on the first bad section or record; nothing is written.
    """
    out: dict[str, list[Any]] = {}
    for doc_key, merge_key, decode in _SECTIONS:
        if doc_key not in document or document[doc_key] is None:
            continue
        records = document[doc_key]
        if not isinstance(records, list):
            raise ParseError(f"{doc_key!r} must be an array")
        decoded = []
        for i, rec in enumerate(records):
            try:
                decoded.append(decode(rec))
            except (KeyError, TypeError, ValueError) as e:
                raise ParseError(f"{doc_key}[{i}]: {e}") from e
        out[merge_key] = decoded
    return out


class BackupCodec:
    """Export/import of the full entity set through a store."""

    def __init__(self, store: TaskRepo, *, app_name: str = "zenflow") -> None:
        self._store = store
        self._app_name = app_name

    async def export_backup(self) -> dict[str, Any]:
        tasks = await self._store.tasks.list()
        projects = await self._store.projects.list()
        tags = await self._store.tags.list()
        logs = await self._store.time_logs.list()

        document = {
            "version": BACKUP_VERSION,
            "exportedAt": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "tasks": [t.to_dict() for t in tasks],
            "projects": [p.to_dict() for p in projects],
            "tags": [t.to_dict() for t in tags],
            "logs": [log.to_dict() for log in logs],
        }
        logger.info(
            "Exported backup tasks=%d projects=%d tags=%d logs=%d",
            len(tasks),
            len(projects),
            len(tags),
            len(logs),
        )
        return document

    async def import_backup(self, raw: str | bytes | dict[str, Any]) -> dict[str, int]:
        """
        Merge a backup document into the store.

        Raises ParseError for malformed input (nothing written) and
        TransactionError if the store aborts the merge (nothing written).
        Returns the number of records merged per collection.
        """
        document = parse_document(raw)

        version = document.get("version")
        if version is not None and version != BACKUP_VERSION:
            logger.warning("Importing backup with version=%r (expected %d)", version, BACKUP_VERSION)

        sections = decode_sections(document)
        if not sections:
            logger.info("Backup contains no collections; nothing to import")
            return {}

        return await self._store.bulk_merge(**sections)

    # ---- file helpers ----

    async def write_backup(self, directory: str | Path, when: datetime | None = None) -> Path:
        """Export and write `<dir>/<app>-backup-YYYY-MM-DD.json` atomically."""
        document = await self.export_backup()
        path = Path(directory) / backup_filename(self._app_name, when)
        await asyncio.to_thread(_write_text_atomic, path, dumps(document))
        logger.info("Backup written to %s", path)
        return path

    async def read_backup(self, path: str | Path) -> dict[str, int]:
        """Read a backup file and merge it into the store."""
        raw = await asyncio.to_thread(Path(path).read_bytes)
        return await self.import_backup(raw)


def _write_text_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(text, "utf-8")
    os.replace(tmp, path)
