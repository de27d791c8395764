# src/zenflow/core/notifications.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .models import TaskStatus, now_ms
from .ports import TaskView

T = TypeVar("T", bound=TaskView)

DUE_SOON_WINDOW_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True, slots=True)
class NotificationSummary(Generic[T]):
    overdue: tuple[T, ...]
    due_soon: tuple[T, ...]

    @property
    def overdue_count(self) -> int:
        return len(self.overdue)

    @property
    def due_soon_count(self) -> int:
        return len(self.due_soon)

    @property
    def total_warnings(self) -> int:
        return len(self.overdue) + len(self.due_soon)

    def describe(self) -> str:
        parts = []
        if self.overdue:
            parts.append(f"{len(self.overdue)} overdue")
        if self.due_soon:
            parts.append(f"{len(self.due_soon)} due soon")
        return ", ".join(parts) or "nothing due"


def evaluate_notifications(tasks: Iterable[T], now: int | None = None) -> NotificationSummary[T]:
    """
    Split open tasks with an end date into overdue / due-soon buckets.

    overdue:  end_date < now
    due soon: now < end_date < now + 24h
    A task whose end_date equals `now` is in neither bucket.
    """
    if now is None:
        now = now_ms()
    horizon = now + DUE_SOON_WINDOW_MS

    overdue: list[T] = []
    due_soon: list[T] = []
    for t in tasks:
        if t.status == TaskStatus.COMPLETED or t.end_date is None:
            continue
        if t.end_date < now:
            overdue.append(t)
        elif now < t.end_date < horizon:
            due_soon.append(t)

    return NotificationSummary(overdue=tuple(overdue), due_soon=tuple(due_soon))
