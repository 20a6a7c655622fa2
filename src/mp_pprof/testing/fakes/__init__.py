"""Testing fakes – in-memory doubles for every inspector port."""
from mp_pprof.testing.fakes.profiling import (
    FakeAllocatorStats,
    FakeCpuSampler,
    FakeHeapProfiler,
    FakeSymbolizer,
)
from mp_pprof.testing.fakes.server import RecordedError, RecordingHttpServer

__all__ = [
    "FakeAllocatorStats",
    "FakeCpuSampler",
    "FakeHeapProfiler",
    "FakeSymbolizer",
    "RecordedError",
    "RecordingHttpServer",
]
