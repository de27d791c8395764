# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from zenflow.cli.bootstrap import create_initial_state
from zenflow.core.models import Priority, Task, TaskStatus
from zenflow.core.state import AppState
from zenflow.store.sqlite_store import ZenStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI layer.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    data_dir = tmp_path / "data"
    return SimpleNamespace(
        app_name="zenflow",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=data_dir,
        db_path=data_dir / "zenflow.sqlite3",
        backup_dir=data_dir / "backups",
        log_dir=data_dir,
        default_sort_key="PRIORITY",
        default_sort_direction="DESC",
        list_limit=50,
        seed_on_start=True,
    )


@pytest.fixture()
def store(tmp_path: Path) -> ZenStore:
    return ZenStore(tmp_path / "store.sqlite3")


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired exactly like the CLI does it, on a temp database."""
    return create_initial_state(settings=settings)


@pytest.fixture()
def make_task() -> Callable[..., Task]:
    """Task factory with sequential ids and created_at values."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> Task:
        counter["n"] += 1
        n = counter["n"]
        fields: dict[str, Any] = {
            "id": f"task-{n}",
            "title": f"Task {n}",
            "created_at": 1_000 * n,
            "status": TaskStatus.TODO,
            "priority": Priority.MEDIUM,
        }
        fields.update(overrides)
        return Task(**fields)

    return _make
