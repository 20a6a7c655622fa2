"""Observability – allocator statistics (heap sample, growth, histogram, summary)."""
from __future__ import annotations

import gc
import threading
import tracemalloc
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import psutil

from mp_pprof.observability.logging import get_logger
from mp_pprof.observability.profiling.heap import format_heap_profile, take_snapshot

__all__ = [
    "AllocatorStats",
    "MALLOC_HISTOGRAM_SIZE",
    "MallocHistogram",
    "TracemallocAllocatorStats",
    "bucket_for",
]

log = get_logger(__name__)

MALLOC_HISTOGRAM_SIZE = 64


@dataclass(frozen=True)
class MallocHistogram:
    """Live block count, live bytes and a power-of-two size histogram.

    ``buckets[i]`` counts blocks whose size lies in ``[2**i, 2**(i+1))``.
    """

    blocks: int
    total: int
    buckets: tuple[int, ...]


def bucket_for(size: int, histogram_size: int = MALLOC_HISTOGRAM_SIZE) -> int:
    return min(max(size.bit_length() - 1, 0), histogram_size - 1)


@runtime_checkable
class AllocatorStats(Protocol):
    """Port: read-only view over the allocator instrumentation."""

    def heap_sample(self) -> str: ...
    def growth(self) -> str: ...
    def histogram(self) -> MallocHistogram: ...
    def summary(self, limit: int) -> str: ...


class TracemallocAllocatorStats:
    """Allocator statistics derived from ``tracemalloc``, ``gc`` and ``psutil``.

    Tracing is switched on lazily by the first query that needs it; the
    snapshot taken at that moment is the baseline for :meth:`growth`.
    """

    def __init__(
        self,
        nframes: int = 16,
        histogram_size: int = MALLOC_HISTOGRAM_SIZE,
    ) -> None:
        self._nframes = nframes
        self._histogram_size = histogram_size
        self._baseline: tracemalloc.Snapshot | None = None
        self._lock = threading.Lock()

    def _snapshot(self) -> tuple[tracemalloc.Snapshot, tracemalloc.Snapshot]:
        with self._lock:
            if not tracemalloc.is_tracing():
                tracemalloc.start(self._nframes)
                log.info("tracemalloc_started", nframes=self._nframes)
                self._baseline = None
            snapshot = take_snapshot()
            if self._baseline is None:
                self._baseline = snapshot
            return snapshot, self._baseline

    def heap_sample(self) -> str:
        stats = self._snapshot()[0].statistics("traceback")
        return format_heap_profile((s.count, s.size, s.traceback) for s in stats)

    def growth(self) -> str:
        snapshot, baseline = self._snapshot()
        diffs = snapshot.compare_to(baseline, "traceback")
        return format_heap_profile(
            ((max(d.count_diff, 0), d.size_diff, d.traceback) for d in diffs if d.size_diff > 0),
            tag="growthz",
        )

    def histogram(self) -> MallocHistogram:
        buckets = [0] * self._histogram_size
        blocks = 0
        total = 0
        for trace in self._snapshot()[0].traces:
            blocks += 1
            total += trace.size
            buckets[bucket_for(trace.size, self._histogram_size)] += 1
        return MallocHistogram(blocks=blocks, total=total, buckets=tuple(buckets))

    def summary(self, limit: int) -> str:
        lines: list[str] = []
        tracing = tracemalloc.is_tracing()
        lines.append(f"tracemalloc_tracing: {tracing}")
        if tracing:
            current, peak = tracemalloc.get_traced_memory()
            lines.append(f"tracemalloc_frames: {tracemalloc.get_traceback_limit()}")
            lines.append(f"traced_current_bytes: {current}")
            lines.append(f"traced_peak_bytes: {peak}")
            lines.append(f"tracemalloc_overhead_bytes: {tracemalloc.get_tracemalloc_memory()}")

        lines.append("gc_counts: " + " ".join(str(c) for c in gc.get_count()))
        for generation, stat in enumerate(gc.get_stats()):
            lines.append(
                f"gc_generation_{generation}: collections={stat.get('collections', 0)} "
                f"collected={stat.get('collected', 0)} "
                f"uncollectable={stat.get('uncollectable', 0)}"
            )

        try:
            process = psutil.Process()
            memory = process.memory_info()
            lines.append(f"process_rss_bytes: {memory.rss}")
            lines.append(f"process_vms_bytes: {memory.vms}")
            lines.append(f"process_threads: {process.num_threads()}")
        except psutil.Error as exc:
            log.warning("process_stats_unavailable", error=str(exc))

        text = "\n".join(lines) + "\n"
        encoded = text.encode("utf-8")
        if len(encoded) > limit:
            return encoded[:limit].decode("utf-8", errors="ignore")
        return text
