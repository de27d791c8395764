# tests/test_notifications.py

from __future__ import annotations

from zenflow.core.models import TaskStatus
from zenflow.core.notifications import DUE_SOON_WINDOW_MS, evaluate_notifications

NOW = 1_000_000


def test_due_in_thirty_minutes_is_due_soon_only(make_task) -> None:
    task = make_task(end_date=NOW + 30 * 60 * 1000)
    summary = evaluate_notifications([task], NOW)
    assert summary.due_soon == (task,)
    assert summary.overdue == ()


def test_past_end_date_is_overdue_only(make_task) -> None:
    task = make_task(end_date=999_000)
    summary = evaluate_notifications([task], NOW)
    assert summary.overdue == (task,)
    assert summary.due_soon == ()


def test_boundaries_belong_to_neither_bucket(make_task) -> None:
    at_now = make_task(end_date=NOW)
    at_horizon = make_task(end_date=NOW + DUE_SOON_WINDOW_MS)
    far = make_task(end_date=NOW + 2 * DUE_SOON_WINDOW_MS)
    undated = make_task()

    summary = evaluate_notifications([at_now, at_horizon, far, undated], NOW)
    assert summary.total_warnings == 0
    assert summary.describe() == "nothing due"


def test_completed_tasks_are_ignored(make_task) -> None:
    done_late = make_task(end_date=NOW - 1, status=TaskStatus.COMPLETED)
    done_soon = make_task(end_date=NOW + 1, status=TaskStatus.COMPLETED)
    in_progress = make_task(end_date=NOW - 1, status=TaskStatus.IN_PROGRESS)

    summary = evaluate_notifications([done_late, done_soon, in_progress], NOW)
    assert summary.overdue == (in_progress,)
    assert summary.due_soon_count == 0


def test_counts_and_description(make_task) -> None:
    tasks = [
        make_task(end_date=NOW - 10),
        make_task(end_date=NOW - 20),
        make_task(end_date=NOW + 10),
    ]
    summary = evaluate_notifications(tasks, NOW)
    assert (summary.overdue_count, summary.due_soon_count, summary.total_warnings) == (2, 1, 3)
    assert summary.describe() == "2 overdue, 1 due soon"
