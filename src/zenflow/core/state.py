# src/zenflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..backup.codec import BackupCodec
from ..store.sqlite_store import ZenStore
from .advice import OfflineAdvisor
from .models import Project, Tag, Task, TimeLog
from .notifications import NotificationSummary, evaluate_notifications
from .query import SortConfig, ViewFilter, query_tasks


@dataclass
class AppState:
    settings: Any
    store: ZenStore
    codec: BackupCodec
    advisor: OfflineAdvisor = field(default_factory=OfflineAdvisor)

    # Session-local view state (never persisted).
    view_filter: ViewFilter = field(default_factory=ViewFilter.all)
    sort_config: SortConfig = field(default_factory=SortConfig)
    search: str = ""
    notifications_dismissed: bool = False
    active_log_id: str | None = None

    # Snapshot from the last refresh().
    tasks: list[Task] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    logs: list[TimeLog] = field(default_factory=list)

    # What /list showed last; commands address tasks by 1-based position here.
    last_listed: list[Task] = field(default_factory=list)

    async def refresh(self) -> None:
        """Re-read every collection (full refresh after each mutation)."""
        self.tasks = await self.store.tasks.list()
        self.projects = await self.store.projects.list()
        self.tags = await self.store.tags.list()
        self.logs = await self.store.time_logs.list()

    def visible_tasks(self) -> list[Task]:
        return query_tasks(self.tasks, self.view_filter, self.sort_config, self.search)

    def notifications(self, now: int | None = None) -> NotificationSummary[Task]:
        return evaluate_notifications(self.tasks, now)
