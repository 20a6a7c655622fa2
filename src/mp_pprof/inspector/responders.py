"""Inspector – synchronous stat endpoints.

Every handler here reads the allocator (or ``/proc``), answers, and closes
the connection before returning.  None of them holds state, so they are
safe to call concurrently.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable

from mp_pprof.inspector.http import HttpRequest, HttpServer, reply
from mp_pprof.kernel.errors import ReadError
from mp_pprof.observability.logging import get_logger
from mp_pprof.observability.profiling import AllocatorStats, MallocHistogram, read_file

__all__ = ["StatResponders", "render_histogram"]

log = get_logger(__name__)

HEAP_STATS_LIMIT = 64 * 1024


def render_histogram(histogram: MallocHistogram) -> str:
    lines = [f"blocks {histogram.blocks}", f"total {histogram.total}"]
    lines.extend(f"{index} {count}" for index, count in enumerate(histogram.buckets))
    return "\n".join(lines) + "\n"


class StatResponders:
    """Handlers for growth, histogram, heap stats and the command line."""

    def __init__(
        self,
        server: HttpServer,
        allocator: AllocatorStats,
        cmdline_path: str | Path = "/proc/self/cmdline",
        heap_stats_limit: int = HEAP_STATS_LIMIT,
    ) -> None:
        self._server = server
        self._allocator = allocator
        self._cmdline_path = Path(cmdline_path)
        self._heap_stats_limit = heap_stats_limit

    def growth(self, request: HttpRequest) -> None:
        reply(self._server, request, self._read("growth", self._allocator.growth))

    def heap_histogram(self, request: HttpRequest) -> None:
        reply(
            self._server,
            request,
            self._read("histogram", lambda: render_histogram(self._allocator.histogram())),
        )

    def heap_stats(self, request: HttpRequest) -> None:
        reply(
            self._server,
            request,
            self._read("summary", lambda: self._allocator.summary(self._heap_stats_limit)),
        )

    def cmdline(self, request: HttpRequest) -> None:
        reply(self._server, request, read_file(self._cmdline_path).replace(b"\0", b"\n"))

    def _read(self, what: str, query: Callable[[], str]) -> bytes:
        try:
            return query().encode("utf-8")
        except ReadError as exc:
            log.warning("allocator_read_failed", query=what, **exc.to_dict())
            return b""
