# src/zenflow/tasks/sessions.py

"""
Tracked work sessions.

A session is a TimeLog opened by start_session() with duration 0 and closed by
stop_session(), which stamps end_time and the elapsed whole seconds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.models import Task, TimeLog, TimeLogType, now_ms
from ..core.ports import TaskRepo
from .service import generate_id

logger = logging.getLogger(__name__)


async def start_session(
    store: TaskRepo,
    task_id: str,
    *,
    kind: TimeLogType = TimeLogType.POMODORO,
    now: int | None = None,
) -> TimeLog:
    ts = now_ms() if now is None else now
    log = TimeLog(id=generate_id(ts), task_id=task_id, start_time=ts, duration_seconds=0, type=kind)
    await store.time_logs.add(log)
    logger.info("Session started log=%s task=%s type=%s", log.id, task_id, kind.value)
    return log


async def stop_session(store: TaskRepo, log_id: str, *, now: int | None = None) -> TimeLog | None:
    """Finalize a session. Returns None if the log no longer exists."""
    log = await store.time_logs.get(log_id)
    if log is None:
        logger.warning("stop_session: log %s not found", log_id)
        return None

    ts = now_ms() if now is None else now
    duration = max(0, (ts - log.start_time) // 1000)
    stopped = await store.time_logs.update(log_id, end_time=ts, duration_seconds=duration)
    logger.info("Session stopped log=%s duration=%ss", log_id, duration)
    return stopped


def tracked_seconds(logs: Iterable[TimeLog], task_id: str) -> int:
    return sum(log.duration_seconds for log in logs if log.task_id == task_id)


def orphaned_time_logs(tasks: Iterable[Task], logs: Iterable[TimeLog]) -> list[TimeLog]:
    """Logs pointing at a task id that no longer exists (deletes do not cascade)."""
    known = {t.id for t in tasks}
    return [log for log in logs if log.task_id not in known]
