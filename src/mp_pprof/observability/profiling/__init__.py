"""Observability – Profiling collaborators (CPU, heap, allocator, symbols)."""
from mp_pprof.observability.profiling.allocator import (
    MALLOC_HISTOGRAM_SIZE,
    AllocatorStats,
    MallocHistogram,
    TracemallocAllocatorStats,
)
from mp_pprof.observability.profiling.files import read_file
from mp_pprof.observability.profiling.heap import (
    HeapProfiler,
    TracemallocHeapProfiler,
    format_heap_profile,
)
from mp_pprof.observability.profiling.sampler import CpuSampler, PyinstrumentCpuSampler
from mp_pprof.observability.profiling.symbolizer import PythonSymbolizer, Symbolizer

__all__ = [
    "MALLOC_HISTOGRAM_SIZE",
    "AllocatorStats",
    "CpuSampler",
    "HeapProfiler",
    "MallocHistogram",
    "PythonSymbolizer",
    "PyinstrumentCpuSampler",
    "Symbolizer",
    "TracemallocAllocatorStats",
    "TracemallocHeapProfiler",
    "format_heap_profile",
    "read_file",
]
