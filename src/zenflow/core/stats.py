# src/zenflow/core/stats.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import Priority, TaskStatus
from .ports import TaskView


@dataclass(frozen=True, slots=True)
class TaskStats:
    """Overview counters; the *_active fields ignore completed tasks."""

    total: int
    completed: int
    active: int
    pinned: int
    high_active: int
    medium_active: int
    low_active: int


def compute_stats(tasks: Iterable[TaskView]) -> TaskStats:
    total = completed = pinned = 0
    by_priority = {Priority.HIGH: 0, Priority.MEDIUM: 0, Priority.LOW: 0}

    for t in tasks:
        total += 1
        if t.is_pinned:
            pinned += 1
        if t.status == TaskStatus.COMPLETED:
            completed += 1
            continue
        by_priority[Priority(t.priority)] += 1

    return TaskStats(
        total=total,
        completed=completed,
        active=total - completed,
        pinned=pinned,
        high_active=by_priority[Priority.HIGH],
        medium_active=by_priority[Priority.MEDIUM],
        low_active=by_priority[Priority.LOW],
    )
