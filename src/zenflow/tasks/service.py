# src/zenflow/tasks/service.py

from __future__ import annotations

import logging
import secrets
import string

from ..core.models import Priority, Task, TaskStatus, now_ms
from ..core.ports import TaskRepo
from ..errors import ValidationError

logger = logging.getLogger(__name__)

_B36 = string.digits + string.ascii_lowercase


def _base36(n: int) -> str:
    if n <= 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_B36[r])
    return "".join(reversed(out))


def generate_id(now: int | None = None) -> str:
    """Time-ordered prefix plus a random suffix, e.g. 'm1x9k2qa' + '4fz81c0q3b'."""
    ts = now_ms() if now is None else now
    suffix = "".join(secrets.choice(_B36) for _ in range(10))
    return _base36(ts) + suffix


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title must not be empty", field="title")
    return cleaned


async def create_task(
    store: TaskRepo,
    title: str,
    *,
    start_date: int | None = None,
    end_date: int | None = None,
    due_date: int | None = None,
    priority: Priority | None = None,
    description: str | None = None,
    project_id: str | None = None,
    tags: list[str] | None = None,
    estimated_minutes: int | None = None,
    now: int | None = None,
) -> Task:
    """
    Create and persist a new task.

    New tasks start as TODO, unpinned, MEDIUM priority unless given, with
    created_at == updated_at == now.
    """
    ts = now_ms() if now is None else now
    task = Task(
        id=generate_id(ts),
        title=_clean_title(title),
        created_at=ts,
        updated_at=ts,
        status=TaskStatus.TODO,
        priority=priority or Priority.MEDIUM,
        tags=list(tags or []),
        description=description,
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
        due_date=due_date,
        estimated_minutes=estimated_minutes,
        is_pinned=False,
    )
    await store.tasks.add(task)
    logger.info("Task created id=%s priority=%s", task.id, task.priority.value)
    return task


async def edit_task(
    store: TaskRepo,
    task_id: str,
    *,
    title: str,
    start_date: int | None,
    end_date: int | None,
    priority: Priority | None = None,
    now: int | None = None,
) -> Task:
    """Apply the edit form: title, schedule window and priority (MEDIUM if omitted)."""
    return await store.tasks.update(
        task_id,
        title=_clean_title(title),
        start_date=start_date,
        end_date=end_date,
        priority=priority or Priority.MEDIUM,
        updated_at=now_ms() if now is None else now,
    )


async def rename_task(store: TaskRepo, task: Task, new_title: str, *, now: int | None = None) -> Task:
    """Inline title edit; blank or unchanged titles are ignored."""
    if not (new_title or "").strip() or new_title == task.title:
        return task
    return await store.tasks.update(
        task.id,
        title=new_title,
        updated_at=now_ms() if now is None else now,
    )


async def toggle_status(store: TaskRepo, task: Task, *, now: int | None = None) -> Task:
    """COMPLETED -> TODO, anything else -> COMPLETED. Pin state is kept."""
    new_status = TaskStatus.TODO if task.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
    updated = await store.tasks.update(
        task.id,
        status=new_status,
        updated_at=now_ms() if now is None else now,
    )
    logger.info("Task %s -> %s", task.id, new_status.value)
    return updated


async def toggle_pin(store: TaskRepo, task: Task, *, now: int | None = None) -> Task:
    return await store.tasks.update(
        task.id,
        is_pinned=not task.is_pinned,
        updated_at=now_ms() if now is None else now,
    )


async def delete_task(store: TaskRepo, task_id: str) -> None:
    # Time logs referencing the task are kept.
    await store.tasks.delete(task_id)
    logger.info("Task deleted id=%s", task_id)
