"""Application scheduler – one-shot timer port, APScheduler adapter, in-memory fake."""
from mp_pprof.application.scheduler.apscheduler import APSchedulerAdapter
from mp_pprof.application.scheduler.in_memory import InMemoryScheduler
from mp_pprof.application.scheduler.scheduler import (
    Scheduler,
    TaskExecutedEvent,
    TaskExecutionContext,
)
from mp_pprof.application.scheduler.task import ScheduledTask

__all__ = [
    "APSchedulerAdapter",
    "InMemoryScheduler",
    "ScheduledTask",
    "Scheduler",
    "TaskExecutedEvent",
    "TaskExecutionContext",
]
