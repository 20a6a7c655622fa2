"""Application scheduler – InMemoryScheduler for unit tests."""
from __future__ import annotations

from typing import Callable

from mp_pprof.application.scheduler.scheduler import TaskExecutedEvent, TaskExecutionContext
from mp_pprof.application.scheduler.task import ScheduledTask

__all__ = ["InMemoryScheduler"]


class InMemoryScheduler:
    """Scheduler on a virtual clock; ``advance`` fires tasks that fall due."""

    def __init__(self) -> None:
        self._now = 0.0
        self._pending: list[ScheduledTask] = []
        self.execution_log: list[TaskExecutedEvent] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> list[ScheduledTask]:
        return list(self._pending)

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        name: str = "task",
    ) -> ScheduledTask:
        task = ScheduledTask(
            name=name,
            callback=callback,
            delay_seconds=delay_seconds,
            due_at=self._now + delay_seconds,
        )
        self._pending.append(task)
        return task

    def advance(self, seconds: float) -> list[TaskExecutedEvent]:
        """Move the clock forward and run every task now due, in due order."""
        self._now += seconds
        fired: list[TaskExecutedEvent] = []
        while True:
            due = [t for t in self._pending if t.due_at <= self._now]
            if not due:
                return fired
            task = min(due, key=lambda t: t.due_at)
            self._pending.remove(task)
            event = TaskExecutionContext(task=task).run()
            self.execution_log.append(event)
            fired.append(event)

    def run_all(self) -> list[TaskExecutedEvent]:
        """Advance just far enough to fire everything currently pending."""
        if not self._pending:
            return []
        latest = max(t.due_at for t in self._pending)
        return self.advance(max(latest - self._now, 0.0))
