"""Observability – windowed heap profiler backed by ``tracemalloc``.

Profiles are rendered in the legacy pprof heap text layout::

    heap profile: 12: 4096 [12: 4096] @ heapprofile
    3: 1024 [3: 1024] @ app/models.py:42 app/views.py:17

one line per allocation call stack, innermost frame first.
"""
from __future__ import annotations

import tracemalloc
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from mp_pprof.kernel.errors import SamplerStartError
from mp_pprof.observability.logging import get_logger

__all__ = [
    "HeapProfiler",
    "TracemallocHeapProfiler",
    "format_heap_profile",
    "take_snapshot",
]

log = get_logger(__name__)

HeapRecord = tuple[int, int, tracemalloc.Traceback]


def take_snapshot() -> tracemalloc.Snapshot:
    """Snapshot the traced heap, minus tracemalloc's own bookkeeping."""
    return tracemalloc.take_snapshot().filter_traces(
        (tracemalloc.Filter(False, tracemalloc.__file__),)
    )


def format_heap_profile(records: Iterable[HeapRecord], tag: str = "heapprofile") -> str:
    """Render ``(count, size, traceback)`` records as pprof heap text."""
    rows = sorted(records, key=lambda r: r[1], reverse=True)
    total_count = sum(count for count, _, _ in rows)
    total_size = sum(size for _, size, _ in rows)
    lines = [f"heap profile: {total_count}: {total_size} [{total_count}: {total_size}] @ {tag}"]
    for count, size, traceback in rows:
        frames = " ".join(f"{frame.filename}:{frame.lineno}" for frame in reversed(traceback))
        lines.append(f"{count}: {size} [{count}: {size}] @ {frames}")
    return "\n".join(lines) + "\n"


@runtime_checkable
class HeapProfiler(Protocol):
    """Port: windowed heap profiler."""

    def start(self, path: str | Path) -> None:
        """Begin recording; raise :class:`SamplerStartError` on failure."""
        ...

    def dump(self) -> str:
        """Return (and persist) the profile accumulated since ``start``."""
        ...

    def stop(self) -> None: ...


class TracemallocHeapProfiler:
    """Record allocations that are still live at :meth:`dump` time.

    If tracing is off when the window opens the profiler turns it on and
    turns it off again in :meth:`stop`; if somebody else already traces the
    heap (``PYTHONTRACEMALLOC``, allocator stats) tracing is left running
    and the profile is the growth over a baseline snapshot.
    """

    def __init__(self, nframes: int = 16) -> None:
        self._nframes = nframes
        self._path: Path | None = None
        self._baseline: tracemalloc.Snapshot | None = None
        self._owns_tracing = False

    @property
    def is_running(self) -> bool:
        return self._baseline is not None

    def start(self, path: str | Path) -> None:
        if self.is_running:
            raise SamplerStartError("tracemalloc", "heap profiler already running")
        self._path = Path(path)
        try:
            self._owns_tracing = not tracemalloc.is_tracing()
            if self._owns_tracing:
                tracemalloc.start(self._nframes)
            self._baseline = take_snapshot()
        except Exception as exc:  # noqa: BLE001
            self._owns_tracing = False
            raise SamplerStartError("tracemalloc", str(exc), cause=exc) from exc

    def dump(self) -> str:
        if self._baseline is None or not tracemalloc.is_tracing():
            return ""
        diffs = take_snapshot().compare_to(self._baseline, "traceback")
        profile = format_heap_profile(
            (max(d.count_diff, 0), d.size_diff, d.traceback) for d in diffs if d.size_diff > 0
        )
        if self._path is not None:
            try:
                self._path.write_text(profile, encoding="utf-8")
            except OSError as exc:
                log.warning("heap_profile_write_failed", path=str(self._path), error=str(exc))
        return profile

    def stop(self) -> None:
        self._baseline = None
        if self._owns_tracing and tracemalloc.is_tracing():
            tracemalloc.stop()
        self._owns_tracing = False
