"""Testing support – fakes for the inspector ports.

Use together with :class:`mp_pprof.application.scheduler.InMemoryScheduler`
to drive profile windows without sleeping.
"""

from mp_pprof.testing.fakes import (
    FakeAllocatorStats,
    FakeCpuSampler,
    FakeHeapProfiler,
    FakeSymbolizer,
    RecordingHttpServer,
)

__all__ = [
    "FakeAllocatorStats",
    "FakeCpuSampler",
    "FakeHeapProfiler",
    "FakeSymbolizer",
    "RecordingHttpServer",
]
