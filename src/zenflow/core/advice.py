# src/zenflow/core/advice.py

from __future__ import annotations

import random

from .ports import TaskView

_TASK_ADVICE = "Break this task down into smaller steps and start with the easiest one."

_QUOTES = (
    "Focus on the process, not just the outcome.",
    "Small progress is still progress.",
    "Consistency is key.",
    "Do it now.",
)


class OfflineAdvisor:
    """
    Deterministic, offline productivity tips.

    No external service is contacted; `rng` can be injected for tests.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def task_advice(self, task: TaskView) -> str:
        return _TASK_ADVICE

    def daily_motivation(self) -> str:
        return self._rng.choice(_QUOTES)
