# src/zenflow/core/query.py

"""
Task query engine: view filter + stable multi-key sort.

Ordering, strongest rule first:
1. completed tasks go last
2. pinned before unpinned (non-completed tasks only)
3. the configured key (PRIORITY / DUE_DATE / CREATED)
4. tie-break: newest createdAt first

DUE_DATE always puts dated tasks first and orders them soonest first;
the configured direction does not apply to it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from functools import cmp_to_key
from typing import TypeVar

from .models import Priority, TaskStatus
from .ports import TaskView

T = TypeVar("T", bound=TaskView)


class ViewKind(StrEnum):
    ALL = "ALL"
    COMPLETED = "COMPLETED"
    PINNED = "PINNED"
    PRIORITY = "PRIORITY"


class SortKey(StrEnum):
    PRIORITY = "PRIORITY"
    DUE_DATE = "DUE_DATE"
    CREATED = "CREATED"


class SortDirection(StrEnum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True, slots=True)
class ViewFilter:
    kind: ViewKind = ViewKind.ALL
    priority: Priority | None = None

    def __post_init__(self) -> None:
        if self.kind == ViewKind.PRIORITY and self.priority is None:
            raise ValueError("PRIORITY view needs a priority value")

    @classmethod
    def all(cls) -> ViewFilter:
        return cls(ViewKind.ALL)

    @classmethod
    def completed(cls) -> ViewFilter:
        return cls(ViewKind.COMPLETED)

    @classmethod
    def pinned(cls) -> ViewFilter:
        return cls(ViewKind.PINNED)

    @classmethod
    def by_priority(cls, priority: Priority) -> ViewFilter:
        return cls(ViewKind.PRIORITY, Priority(priority))

    def matches(self, task: TaskView) -> bool:
        if self.kind == ViewKind.COMPLETED:
            return task.status == TaskStatus.COMPLETED
        if self.kind == ViewKind.PINNED:
            return bool(task.is_pinned)
        if self.kind == ViewKind.PRIORITY:
            return task.priority == self.priority and task.status != TaskStatus.COMPLETED
        return True


@dataclass(frozen=True, slots=True)
class SortConfig:
    key: SortKey = SortKey.PRIORITY
    direction: SortDirection = SortDirection.DESC


def matches_search(task: TaskView, search: str) -> bool:
    if not search:
        return True
    return search.lower() in (task.title or "").lower()


def filter_tasks(tasks: Iterable[T], view_filter: ViewFilter, search: str = "") -> list[T]:
    return [t for t in tasks if matches_search(t, search) and view_filter.matches(t)]


def _primary_diff(a: TaskView, b: TaskView, key: SortKey) -> int:
    if key == SortKey.PRIORITY:
        return Priority(a.priority).rank - Priority(b.priority).rank
    if key == SortKey.DUE_DATE:
        a_due, b_due = a.end_date, b.end_date
        if a_due is not None and b_due is None:
            return -1
        if a_due is None and b_due is not None:
            return 1
        if a_due is None or b_due is None:
            return 0
        return a_due - b_due
    return a.created_at - b.created_at


def compare_tasks(a: TaskView, b: TaskView, config: SortConfig) -> int:
    """cmp-style comparator implementing the list ordering."""
    a_done = a.status == TaskStatus.COMPLETED
    b_done = b.status == TaskStatus.COMPLETED
    if a_done != b_done:
        return 1 if a_done else -1

    if not a_done and bool(a.is_pinned) != bool(b.is_pinned):
        return -1 if a.is_pinned else 1

    diff = _primary_diff(a, b, config.key)
    if diff != 0:
        if config.key == SortKey.DUE_DATE:
            return diff
        return diff if config.direction == SortDirection.ASC else -diff

    return b.created_at - a.created_at


def sort_tasks(tasks: Iterable[T], config: SortConfig) -> list[T]:
    """Return a new, ordered list; the input is left as-is."""
    return sorted(tasks, key=cmp_to_key(lambda a, b: compare_tasks(a, b, config)))


def query_tasks(
    tasks: Iterable[T],
    view_filter: ViewFilter | None = None,
    sort_config: SortConfig | None = None,
    search: str = "",
) -> list[T]:
    return sort_tasks(
        filter_tasks(tasks, view_filter or ViewFilter.all(), search),
        sort_config or SortConfig(),
    )
