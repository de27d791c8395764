# src/zenflow/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..errors import ZenflowError

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands, /list to see tasks, /exit to quit.\n")

    app_name = str(getattr(state.settings, "app_name", "zenflow"))

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (export/import).
        print(f"[{_ts_local()}] {text}", flush=True)

    summary = state.notifications()
    if summary.total_warnings:
        _print_ts(f"Heads up: {summary.describe()}. Use /notify for details.")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, f"{app_name}> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            user_input = "/add " + user_input

        try:
            reply = await command_registry.handle(state, user_input, emit=emit)
        except ZenflowError as e:
            logger.info("Command rejected: %s", e)
            reply = f"Error: {e}"
        except OSError as e:
            logger.warning("Command I/O failure: %s", e)
            reply = f"File error: {e}"
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            print(f"[{_ts_local()}] {reply}")

    logger.info("Console connector finished.")
