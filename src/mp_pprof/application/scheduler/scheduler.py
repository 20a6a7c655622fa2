"""Application scheduler – Scheduler Protocol and TaskExecutionContext."""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Protocol, runtime_checkable

from mp_pprof.application.scheduler.task import ScheduledTask
from mp_pprof.observability.logging import get_logger

__all__ = ["Scheduler", "TaskExecutedEvent", "TaskExecutionContext"]

log = get_logger(__name__)


@dataclass(frozen=True)
class TaskExecutedEvent:
    """Event emitted after a task completes (successfully or not)."""

    task_name: str
    started_at: datetime
    duration_ms: float
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class TaskExecutionContext:
    """Run a task callback and capture execution details.

    A failing callback is recorded on the event and logged; it never
    propagates into the event loop or timer thread that fired it.
    """

    task: ScheduledTask

    def run(self) -> TaskExecutedEvent:
        self.task.fired = True
        started_at = datetime.now(tz=timezone.utc)
        t0 = time.monotonic()
        error: str | None = None
        try:
            self.task.callback()
        except Exception as exc:  # noqa: BLE001
            error = str(exc)
            log.exception("scheduled_task_failed", task=self.task.name)
        duration_ms = (time.monotonic() - t0) * 1000
        return TaskExecutedEvent(
            task_name=self.task.name,
            started_at=started_at,
            duration_ms=duration_ms,
            error=error,
        )


@runtime_checkable
class Scheduler(Protocol):
    """Port: run a callback once after a delay."""

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        name: str = "task",
    ) -> ScheduledTask: ...
