# src/zenflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (settings + store + backup codec),
seeds defaults and runs the console REPL.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, start
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.sessions import stop_session

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Close a running work session so its duration is not lost."""
    if state.active_log_id is None:
        return
    try:
        await stop_session(state.store, state.active_log_id)
    except Exception:
        logger.exception("Failed to stop running session %s.", state.active_log_id)
    state.active_log_id = None


async def run(state: AppState) -> None:
    await start(state)
    try:
        if state.settings.console_enabled:
            await run_console_loop(state)
        else:
            summary = state.notifications()
            logger.info("Console disabled. %d tasks loaded, %s.", len(state.tasks), summary.describe())
    finally:
        await _shutdown(state)
        state.store.close()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, app_name=settings.app_name, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
