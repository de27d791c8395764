# src/zenflow/core/models.py

"""
Entity schema shared by the store, the backup codec and the pure reducers.

Instants are integer milliseconds since the Unix epoch.
Attribute names are snake_case; to_dict()/from_dict() use the camelCase
names of the backup document.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - only TODO <-> COMPLETED is ever produced by zenflow itself;
      IN_PROGRESS is accepted from storage and backups and kept as-is.
    """

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(str(raw).upper())
        except ValueError:
            return cls.TODO


class Priority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).upper())
        except ValueError:
            return cls.MEDIUM

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.LOW: 1, Priority.MEDIUM: 2, Priority.HIGH: 3}


class TimeLogType(StrEnum):
    POMODORO = "POMODORO"
    MANUAL = "MANUAL"
    FLOW = "FLOW"

    @classmethod
    def from_db(cls, raw: str | None) -> TimeLogType:
        if not raw:
            return cls.MANUAL
        try:
            return cls(str(raw).upper())
        except ValueError:
            return cls.MANUAL


def _req_str(data: dict[str, Any], key: str) -> str:
    val = data[key]
    if not isinstance(val, str) or not val:
        raise ValueError(f"{key!r} must be a non-empty string")
    return val


def _opt_str(data: dict[str, Any], key: str) -> str | None:
    val = data.get(key)
    if val is None:
        return None
    if not isinstance(val, str):
        raise ValueError(f"{key!r} must be a string")
    return val


def _req_int(data: dict[str, Any], key: str) -> int:
    val = data[key]
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValueError(f"{key!r} must be a number")
    if isinstance(val, float) and not math.isfinite(val):
        raise ValueError(f"{key!r} must be a finite number")
    return int(val)


def _opt_int(data: dict[str, Any], key: str) -> int | None:
    if data.get(key) is None:
        return None
    return _req_int(data, key)


def _opt_bool(data: dict[str, Any], key: str) -> bool:
    val = data.get(key)
    if val is None:
        return False
    if not isinstance(val, bool):
        raise ValueError(f"{key!r} must be true or false")
    return val


def _compact(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: int

    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    tags: list[str] = field(default_factory=list)

    description: str | None = None
    parent_id: str | None = None
    project_id: str | None = None

    start_date: int | None = None
    end_date: int | None = None
    due_date: int | None = None
    estimated_minutes: int | None = None

    updated_at: int | None = None
    is_pinned: bool = False
    attachments: list[dict[str, Any]] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "title": self.title,
                "description": self.description,
                "parentId": self.parent_id,
                "projectId": self.project_id,
                "status": self.status.value,
                "priority": self.priority.value,
                "tags": list(self.tags),
                "startDate": self.start_date,
                "endDate": self.end_date,
                "dueDate": self.due_date,
                "estimatedMinutes": self.estimated_minutes,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "isPinned": bool(self.is_pinned),
                "attachments": [dict(a) for a in self.attachments]
                if self.attachments is not None
                else None,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        if not isinstance(data, dict):
            raise ValueError("task record must be an object")

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError("'tags' must be a list of strings")

        attachments = data.get("attachments")
        if attachments is not None and (
            not isinstance(attachments, list) or not all(isinstance(a, dict) for a in attachments)
        ):
            raise ValueError("'attachments' must be a list of objects")

        return cls(
            id=_req_str(data, "id"),
            title=_req_str(data, "title"),
            description=_opt_str(data, "description"),
            parent_id=_opt_str(data, "parentId"),
            project_id=_opt_str(data, "projectId"),
            status=TaskStatus.from_db(data.get("status")),
            priority=Priority.from_db(data.get("priority")),
            tags=list(tags),
            start_date=_opt_int(data, "startDate"),
            end_date=_opt_int(data, "endDate"),
            due_date=_opt_int(data, "dueDate"),
            estimated_minutes=_opt_int(data, "estimatedMinutes"),
            created_at=_req_int(data, "createdAt"),
            updated_at=_opt_int(data, "updatedAt"),
            is_pinned=_opt_bool(data, "isPinned"),
            attachments=[dict(a) for a in attachments] if attachments is not None else None,
        )


@dataclass(slots=True)
class Project:
    id: str
    name: str
    color: str
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name, "color": self.color, "icon": self.icon})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        if not isinstance(data, dict):
            raise ValueError("project record must be an object")
        return cls(
            id=_req_str(data, "id"),
            name=_req_str(data, "name"),
            color=str(data.get("color") or ""),
            icon=_opt_str(data, "icon"),
        )


@dataclass(slots=True)
class Tag:
    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        if not isinstance(data, dict):
            raise ValueError("tag record must be an object")
        return cls(
            id=_req_str(data, "id"),
            name=_req_str(data, "name"),
            color=str(data.get("color") or ""),
        )


@dataclass(slots=True)
class TimeLog:
    id: str
    task_id: str
    start_time: int
    duration_seconds: int = 0
    type: TimeLogType = TimeLogType.MANUAL
    end_time: int | None = None

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "taskId": self.task_id,
                "startTime": self.start_time,
                "endTime": self.end_time,
                "durationSeconds": self.duration_seconds,
                "type": self.type.value,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeLog:
        if not isinstance(data, dict):
            raise ValueError("time log record must be an object")
        return cls(
            id=_req_str(data, "id"),
            task_id=_req_str(data, "taskId"),
            start_time=_req_int(data, "startTime"),
            end_time=_opt_int(data, "endTime"),
            duration_seconds=_opt_int(data, "durationSeconds") or 0,
            type=TimeLogType.from_db(data.get("type")),
        )


DEFAULT_PROJECTS: tuple[Project, ...] = (
    Project(id="p1", name="Development", color="#3b82f6"),
    Project(id="p2", name="Design", color="#ec4899"),
    Project(id="p3", name="Marketing", color="#f59e0b"),
)

DEFAULT_TAGS: tuple[Tag, ...] = (
    Tag(id="t1", name="Urgent", color="#ef4444"),
    Tag(id="t2", name="Bug", color="#ef4444"),
    Tag(id="t3", name="Feature", color="#3b82f6"),
)
