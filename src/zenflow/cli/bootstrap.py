# src/zenflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the single ZenStore and the backup codec and wires them into AppState,
- seeds default projects/tags on first start.
"""

from __future__ import annotations

import logging

from ..backup.codec import BackupCodec
from ..config import get_settings
from ..core.query import SortConfig, SortDirection, SortKey
from ..core.state import AppState
from ..store.sqlite_store import ZenStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.backup_dir.mkdir(parents=True, exist_ok=True)


def _sort_config_from(settings) -> SortConfig:
    try:
        key = SortKey(str(getattr(settings, "default_sort_key", "PRIORITY")).upper())
    except ValueError:
        logger.warning("Unknown default sort key %r; using PRIORITY", settings.default_sort_key)
        key = SortKey.PRIORITY
    try:
        direction = SortDirection(str(getattr(settings, "default_sort_direction", "DESC")).upper())
    except ValueError:
        logger.warning(
            "Unknown default sort direction %r; using DESC", settings.default_sort_direction
        )
        direction = SortDirection.DESC
    return SortConfig(key=key, direction=direction)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = ZenStore(settings.db_path)
    return AppState(
        settings=settings,
        store=store,
        codec=BackupCodec(store, app_name=settings.app_name),
        sort_config=_sort_config_from(settings),
    )


async def start(state: AppState) -> None:
    """Startup sequence: seed (if enabled), then load the first snapshot."""
    if getattr(state.settings, "seed_on_start", True):
        await state.store.seed()
    await state.refresh()
    logger.info(
        "Loaded tasks=%d projects=%d tags=%d logs=%d",
        len(state.tasks),
        len(state.projects),
        len(state.tags),
        len(state.logs),
    )
