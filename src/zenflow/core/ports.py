# src/zenflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The pure reducers (query, notifications, stats) read tasks through TaskView,
which lists only the fields they touch. The backup codec and the task helpers
talk to storage through TaskRepo / CollectionRepo so tests can swap in fakes.
"""

from collections.abc import Sequence
from typing import Any, Protocol, TypeVar

from .models import Priority, TaskStatus

E = TypeVar("E")


class TaskView(Protocol):
    """Read-only slice of a Task consumed by the query engine and notifications."""

    @property
    def title(self) -> str: ...

    @property
    def status(self) -> TaskStatus: ...

    @property
    def priority(self) -> Priority: ...

    @property
    def is_pinned(self) -> bool: ...

    @property
    def end_date(self) -> int | None: ...

    @property
    def created_at(self) -> int: ...


class NamedEntity(Protocol):
    """Projects and tags as seen by list rendering: id, display name, color."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def color(self) -> str: ...


class CollectionRepo(Protocol[E]):
    async def add(self, entity: E) -> None: ...
    async def get(self, entity_id: str) -> E | None: ...
    async def update(self, entity_id: str, **fields: Any) -> E: ...
    async def delete(self, entity_id: str) -> None: ...
    async def list(self) -> list[E]: ...
    async def count(self) -> int: ...


class TaskRepo(Protocol):
    """What the backup codec and the task helpers need from a store."""

    @property
    def tasks(self) -> CollectionRepo[Any]: ...

    @property
    def projects(self) -> CollectionRepo[Any]: ...

    @property
    def tags(self) -> CollectionRepo[Any]: ...

    @property
    def time_logs(self) -> CollectionRepo[Any]: ...

    async def bulk_merge(
        self,
        *,
        tasks: Sequence[Any] | None = None,
        projects: Sequence[Any] | None = None,
        tags: Sequence[Any] | None = None,
        time_logs: Sequence[Any] | None = None,
    ) -> dict[str, int]: ...

    async def seed(self) -> bool: ...

    async def reset_all(self) -> None: ...
