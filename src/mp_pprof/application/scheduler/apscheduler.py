"""Application scheduler – APSchedulerAdapter, one-shot ``DateTrigger`` jobs."""
from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from mp_pprof.application.scheduler.scheduler import TaskExecutionContext
from mp_pprof.application.scheduler.task import ScheduledTask
from mp_pprof.observability.logging import get_logger

__all__ = ["APSchedulerAdapter"]

log = get_logger(__name__)


class APSchedulerAdapter:
    """Scheduler backed by APScheduler's :class:`AsyncIOScheduler`.

    Each :meth:`call_later` adds a job with a :class:`DateTrigger` at
    ``now + delay``.  Jobs are coroutines, so they run on the event-loop
    thread (where the CPU sampler was started), never in a worker pool.
    ``call_later`` may be invoked from the loop itself or from any other
    thread.

    The underlying scheduler is created on first use and bound to the loop
    running at that moment, or to *loop* when given.  If that loop has
    since been closed, a new scheduler is bound to the current one.

    Parameters
    ----------
    loop:
        Loop to run jobs on.  Defaults to the loop running in the calling
        thread at ``call_later`` time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._scheduler: AsyncIOScheduler | None = None
        self._bound_loop: asyncio.AbstractEventLoop | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def _get_scheduler(self, loop: asyncio.AbstractEventLoop) -> AsyncIOScheduler:
        with self._lock:
            if self._scheduler is None or self._bound_loop is None or self._bound_loop.is_closed():
                scheduler = AsyncIOScheduler(event_loop=loop, timezone=timezone.utc)
                scheduler.start()
                self._scheduler, self._bound_loop = scheduler, loop
                log.debug("apscheduler_started")
            return self._scheduler

    def call_later(
        self,
        delay_seconds: float,
        callback: Callable[[], None],
        name: str = "task",
    ) -> ScheduledTask:
        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        loop = self._loop or running
        if loop is None:
            raise RuntimeError("APSchedulerAdapter.call_later needs a running event loop")

        task = ScheduledTask(
            name=name,
            callback=callback,
            delay_seconds=delay_seconds,
            due_at=loop.time() + delay_seconds,
        )
        run_date = datetime.now(tz=timezone.utc) + timedelta(seconds=delay_seconds)
        self._get_scheduler(loop).add_job(
            self._fire,
            trigger=DateTrigger(run_date=run_date),
            args=(task,),
            name=name,
            misfire_grace_time=None,
        )
        return task

    async def _fire(self, task: ScheduledTask) -> None:
        event = TaskExecutionContext(task=task).run()
        log.debug(
            "scheduled_task_executed",
            task=event.task_name,
            duration_ms=round(event.duration_ms, 3),
            success=event.success,
        )

    def shutdown(self) -> None:
        """Stop the scheduler, dropping jobs that have not fired yet."""
        with self._lock:
            scheduler, self._scheduler = self._scheduler, None
            loop, self._bound_loop = self._bound_loop, None
        if scheduler is not None and scheduler.running and loop is not None and not loop.is_closed():
            scheduler.shutdown(wait=False)
