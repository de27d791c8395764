# src/zenflow/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import cast

from ..core.models import Priority, Task, TaskStatus, now_ms
from ..core.ports import NamedEntity
from ..core.query import SortConfig, SortDirection, SortKey, ViewFilter
from ..core.state import AppState
from ..core.stats import compute_stats
from ..tasks import service
from ..tasks.sessions import start_session, stop_session, tracked_seconds

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_PRIORITY_TOKENS = {
    "!high": Priority.HIGH,
    "!h": Priority.HIGH,
    "!medium": Priority.MEDIUM,
    "!med": Priority.MEDIUM,
    "!m": Priority.MEDIUM,
    "!low": Priority.LOW,
    "!l": Priority.LOW,
}

_VIEW_ALIASES = {
    "all": ViewFilter.all,
    "completed": ViewFilter.completed,
    "done": ViewFilter.completed,
    "pinned": ViewFilter.pinned,
}

_SORT_ALIASES = {
    "priority": SortKey.PRIORITY,
    "due": SortKey.DUE_DATE,
    "due_date": SortKey.DUE_DATE,
    "created": SortKey.CREATED,
    "newest": SortKey.CREATED,
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return await h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return await h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering helpers ----


def _fmt_ts(ms: int | None) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task_line(index: int, task: Task) -> str:
    box = "[x]" if task.status == TaskStatus.COMPLETED else "[ ]"
    pin = " *" if task.is_pinned and task.status != TaskStatus.COMPLETED else ""
    due = f" due {_fmt_ts(task.end_date)}" if task.end_date is not None else ""
    return f"{index:>3}. {box}{pin} {task.title} ({task.priority.value.lower()}){due}"


def format_named(entity: NamedEntity) -> str:
    return f"{entity.name} ({entity.color}) [{entity.id}]"


def _describe_view(state: AppState) -> str:
    vf = state.view_filter
    view = vf.kind.value.lower()
    if vf.priority is not None:
        view = f"{view}:{vf.priority.value.lower()}"
    sc = state.sort_config
    search = f", search={state.search!r}" if state.search else ""
    return f"view={view}, sort={sc.key.value.lower()} {sc.direction.value.lower()}{search}"


async def _pick(state: AppState, args: list[str], usage: str) -> Task | str:
    """
    Resolve a 1-based position in the last rendered list to the stored task.

    Numbers stay stable until the next /list; the record itself is re-read so
    repeated toggles see the latest state. Returns an error text on failure.
    """
    if not args:
        return usage
    try:
        idx = int(args[0])
    except ValueError:
        return f"Not a task number: {args[0]!r}. {usage}"
    if not state.last_listed:
        return "No list yet. Use /list first."
    if idx < 1 or idx > len(state.last_listed):
        return f"Task number out of range (1..{len(state.last_listed)})."
    listed = state.last_listed[idx - 1]
    current = await state.store.tasks.get(listed.id)
    if current is None:
        return f"Task {idx} ({listed.title}) no longer exists. Use /list to renumber."
    return current


# ---- commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    await state.refresh()
    visible = state.visible_tasks()
    limit = int(getattr(state.settings, "list_limit", 50) or 50)
    state.last_listed = visible[:limit]

    lines = [f"{len(visible)} {'task' if len(visible) == 1 else 'tasks'} ({_describe_view(state)})"]
    lines.extend(format_task_line(i, t) for i, t in enumerate(state.last_listed, start=1))
    if len(visible) > limit:
        lines.append(f"  ... {len(visible) - limit} more")

    summary = state.notifications()
    if summary.total_warnings and not state.notifications_dismissed:
        lines.append(f"Heads up: {summary.describe()}.")
    return "\n".join(lines)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [!high|!medium|!low] [due:<minutes>]
    """
    priority: Priority | None = None
    end_date: int | None = None
    words: list[str] = []
    now = now_ms()

    for token in args:
        low = token.lower()
        if low in _PRIORITY_TOKENS:
            priority = _PRIORITY_TOKENS[low]
        elif low.startswith("due:"):
            try:
                minutes = int(low[4:])
            except ValueError:
                return f"Bad due value {token!r}; expected due:<minutes>."
            end_date = now + minutes * 60_000
        else:
            words.append(token)

    task = await service.create_task(
        state.store,
        " ".join(words),
        start_date=now,
        end_date=end_date,
        priority=priority,
        now=now,
    )
    await state.refresh()
    return f"Added: {task.title} ({task.priority.value.lower()})."


async def cmd_view(state: AppState, args: list[str]) -> str:
    """
    /view all | completed | pinned | high | medium | low
    """
    if not args:
        return f"Current: {_describe_view(state)}."
    arg = args[0].lower()
    if arg in _VIEW_ALIASES:
        state.view_filter = _VIEW_ALIASES[arg]()
    else:
        try:
            state.view_filter = ViewFilter.by_priority(Priority(arg.upper()))
        except ValueError:
            return "Usage: /view all | completed | pinned | high | medium | low"
    return await cmd_list(state, [])


async def cmd_sort(state: AppState, args: list[str]) -> str:
    """
    /sort priority | due | created [asc|desc]
    """
    if not args or args[0].lower() not in _SORT_ALIASES:
        return "Usage: /sort priority | due | created [asc|desc]"
    key = _SORT_ALIASES[args[0].lower()]
    direction = SortDirection.DESC
    if len(args) > 1:
        try:
            direction = SortDirection(args[1].upper())
        except ValueError:
            return "Direction must be asc or desc."
    state.sort_config = SortConfig(key=key, direction=direction)
    return await cmd_list(state, [])


async def cmd_search(state: AppState, args: list[str]) -> str:
    state.search = " ".join(args).strip()
    return await cmd_list(state, [])


async def cmd_done(state: AppState, args: list[str]) -> str:
    picked = await _pick(state, args, "Usage: /done <n>")
    if isinstance(picked, str):
        return picked
    updated = await service.toggle_status(state.store, picked)
    await state.refresh()
    verb = "Completed" if updated.status == TaskStatus.COMPLETED else "Reopened"
    return f"{verb}: {updated.title}"


async def cmd_pin(state: AppState, args: list[str]) -> str:
    picked = await _pick(state, args, "Usage: /pin <n>")
    if isinstance(picked, str):
        return picked
    updated = await service.toggle_pin(state.store, picked)
    await state.refresh()
    return f"{'Pinned' if updated.is_pinned else 'Unpinned'}: {updated.title}"


async def cmd_rename(state: AppState, args: list[str]) -> str:
    picked = await _pick(state, args, "Usage: /rename <n> <new title>")
    if isinstance(picked, str):
        return picked
    new_title = " ".join(args[1:])
    updated = await service.rename_task(state.store, picked, new_title)
    if updated is picked:
        return "Title unchanged."
    await state.refresh()
    return f"Renamed to: {updated.title}"


async def cmd_delete(state: AppState, args: list[str]) -> str:
    picked = await _pick(state, args, "Usage: /delete <n>")
    if isinstance(picked, str):
        return picked
    await service.delete_task(state.store, picked.id)
    await state.refresh()
    return f"Deleted: {picked.title}"


async def cmd_notify(state: AppState, args: list[str]) -> str:
    """
    /notify          -> show overdue / due soon
    /notify dismiss  -> hide the heads-up line for this session
    """
    if args and args[0].lower() == "dismiss":
        state.notifications_dismissed = True
        return "Notifications dismissed for this session."

    await state.refresh()
    summary = state.notifications()
    if not summary.total_warnings:
        return "Nothing overdue or due in the next 24 hours."

    lines = [f"Notifications: {summary.describe()}"]
    for t in summary.overdue:
        lines.append(f"  overdue:  {t.title} (was due {_fmt_ts(t.end_date)})")
    for t in summary.due_soon:
        lines.append(f"  due soon: {t.title} (due {_fmt_ts(t.end_date)})")
    return "\n".join(lines)


async def cmd_stats(state: AppState, args: list[str]) -> str:
    await state.refresh()
    s = compute_stats(state.tasks)
    return (
        "Overview:\n"
        f"  Created: {s.total}\n"
        f"  Active: {s.active}\n"
        f"  Completed: {s.completed}\n"
        f"  Pinned: {s.pinned}\n"
        f"  Active by priority: high={s.high_active} medium={s.medium_active} low={s.low_active}"
    )


async def cmd_start(state: AppState, args: list[str]) -> str:
    if state.active_log_id is not None:
        return "A session is already running. Use /stop first."
    picked = await _pick(state, args, "Usage: /start <n>")
    if isinstance(picked, str):
        return picked
    log = await start_session(state.store, picked.id)
    state.active_log_id = log.id
    return f"Session started for: {picked.title}"


async def cmd_stop(state: AppState, args: list[str]) -> str:
    if state.active_log_id is None:
        return "No running session."
    log = await stop_session(state.store, state.active_log_id)
    state.active_log_id = None
    if log is None:
        return "Session record is gone; nothing saved."
    await state.refresh()
    total = tracked_seconds(state.logs, log.task_id)
    return f"Session stopped after {log.duration_seconds}s (task total {total}s)."


async def cmd_projects(state: AppState, args: list[str]) -> str:
    await state.refresh()
    lines = ["Projects:"]
    lines.extend(f"  {format_named(p)}" for p in state.projects)
    lines.append("Tags:")
    lines.extend(f"  {format_named(t)}" for t in state.tags)
    return "\n".join(lines)


async def cmd_advice(state: AppState, args: list[str]) -> str:
    if not args:
        return state.advisor.daily_motivation()
    picked = await _pick(state, args, "Usage: /advice [n]")
    if isinstance(picked, str):
        return picked
    return state.advisor.task_advice(picked)


async def cmd_export(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    directory = Path(args[0]).expanduser() if args else Path(state.settings.backup_dir)
    if emit:
        emit(f"[BACKUP] Exporting to {directory} ...")
    path = await state.codec.write_backup(directory)
    return f"Backup written: {path}"


async def cmd_import(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """
    /import <path> confirm   (merges into current data)
    """
    if not args:
        return "Usage: /import <path> confirm"
    if len(args) < 2 or args[1].lower() != "confirm":
        return "Importing merges the backup into your current data. Re-run as: /import <path> confirm"
    if emit:
        emit(f"[BACKUP] Importing {args[0]} ...")
    written = await state.codec.read_backup(Path(args[0]).expanduser())
    await state.refresh()
    if not written:
        return "Backup contained no collections; nothing changed."
    return "Import successful: " + ", ".join(f"{k}={v}" for k, v in written.items())


async def cmd_reset(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() != "confirm":
        return "This deletes ALL tasks, projects, tags and time logs. Re-run as: /reset confirm"
    await state.store.reset_all()
    state.active_log_id = None
    state.last_listed = []
    await state.refresh()
    return "All data cleared; default projects and tags restored."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks in the current view.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [!high|!low] [due:<minutes>].")
registry.register("view", cmd_view, help_text="Filter: /view all | completed | pinned | high | medium | low.")
registry.register("sort", cmd_sort, help_text="Order: /sort priority | due | created [asc|desc].")
registry.register("search", cmd_search, help_text="Title search: /search <text> (empty clears).")
registry.register("done", cmd_done, help_text="Toggle completed: /done <n>.")
registry.register("pin", cmd_pin, help_text="Toggle pin: /pin <n>.")
registry.register("rename", cmd_rename, help_text="Rename: /rename <n> <title>.")
registry.register("delete", cmd_delete, help_text="Delete: /delete <n>.", aliases=["rm"])
registry.register("notify", cmd_notify, help_text="Overdue / due soon: /notify [dismiss].")
registry.register("stats", cmd_stats, help_text="Task counters.")
registry.register("start", cmd_start, help_text="Start a tracked session: /start <n>.")
registry.register("stop", cmd_stop, help_text="Stop the running session.")
registry.register("projects", cmd_projects, help_text="Show projects and tags.")
registry.register("advice", cmd_advice, help_text="Offline tip: /advice [n].")
registry.register("export", cmd_export, help_text="Write a JSON backup: /export [dir].")
registry.register("import", cmd_import, help_text="Merge a JSON backup: /import <path> confirm.")
registry.register("reset", cmd_reset, help_text="Delete everything: /reset confirm.")
