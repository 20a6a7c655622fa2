"""Inspector – endpoint registry and default wiring."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Callable

from mp_pprof.application.scheduler import Scheduler
from mp_pprof.config.settings import InspectorSettings
from mp_pprof.inspector.coordinator import CpuProfileCoordinator, HeapProfileCoordinator
from mp_pprof.inspector.http import TEXT_PLAIN, Handler, HttpServer
from mp_pprof.inspector.responders import StatResponders
from mp_pprof.inspector.symbols import SymbolResolver
from mp_pprof.observability.logging import get_logger
from mp_pprof.observability.profiling import (
    AllocatorStats,
    CpuSampler,
    HeapProfiler,
    PythonSymbolizer,
    PyinstrumentCpuSampler,
    Symbolizer,
    TracemallocAllocatorStats,
    TracemallocHeapProfiler,
)

__all__ = ["PProfInspector", "build_inspector"]

log = get_logger(__name__)

_CPU_CONTENT_TYPES = {
    "text": TEXT_PLAIN,
    "speedscope": "application/json",
    "html": "text/html; charset=utf-8",
}


class PProfInspector:
    """Bind every pprof path to its handler on an :class:`HttpServer`.

    A ``None`` server registers nothing; the handlers are still reachable
    through :attr:`routes`.
    """

    def __init__(
        self,
        server: HttpServer | None,
        *,
        cpu: CpuProfileCoordinator,
        heap: HeapProfileCoordinator,
        stats: StatResponders,
        symbols: SymbolResolver,
        prefix: str = "/pprof",
        profile_content_type: str = TEXT_PLAIN,
    ) -> None:
        self.cpu = cpu
        self.heap = heap
        self.stats = stats
        self.symbols = symbols
        self._routes: dict[str, tuple[Handler, str]] = {
            f"{prefix}/profile": (cpu.request_profile, profile_content_type),
            f"{prefix}/heap": (heap.request_heap_profile, TEXT_PLAIN),
            f"{prefix}/heapstats": (stats.heap_stats, TEXT_PLAIN),
            f"{prefix}/heaphistogram": (stats.heap_histogram, TEXT_PLAIN),
            f"{prefix}/growth": (stats.growth, TEXT_PLAIN),
            f"{prefix}/cmdline": (stats.cmdline, TEXT_PLAIN),
            f"{prefix}/symbol": (symbols.handle, TEXT_PLAIN),
        }
        if server is None:
            return
        for path, (handler, content_type) in self._routes.items():
            server.register(path, handler, content_type)
        log.info("pprof_endpoints_registered", paths=sorted(self._routes))

    @property
    def routes(self) -> dict[str, Handler]:
        return {path: handler for path, (handler, _) in self._routes.items()}


def build_inspector(
    server: HttpServer,
    scheduler: Scheduler,
    settings: InspectorSettings | None = None,
    *,
    cpu_sampler: CpuSampler | None = None,
    heap_profiler: HeapProfiler | None = None,
    allocator: AllocatorStats | None = None,
    symbolizer_factory: Callable[[], Symbolizer] = PythonSymbolizer,
    environ: Mapping[str, str] | None = None,
) -> PProfInspector:
    """Wire coordinators and responders from *settings* and register them.

    Any collaborator left as ``None`` gets the production implementation.
    """
    settings = settings or InspectorSettings()
    allocator = allocator or TracemallocAllocatorStats(nframes=settings.heap_stack_depth)

    cpu = CpuProfileCoordinator(
        server,
        scheduler,
        cpu_sampler
        or PyinstrumentCpuSampler(
            interval=settings.cpu_sampling_interval,
            output_format=settings.cpu_profile_format,
        ),
        profile_file=settings.profile_file,
        default_seconds=settings.default_profile_seconds,
        max_seconds=settings.max_profile_seconds,
    )
    heap = HeapProfileCoordinator(
        server,
        scheduler,
        heap_profiler or TracemallocHeapProfiler(nframes=settings.heap_stack_depth),
        allocator,
        heap_profile_file=settings.heap_profile_file,
        window_seconds=settings.heap_profile_seconds,
        continuous_env=settings.continuous_heap_env,
        environ=environ,
    )
    stats = StatResponders(
        server,
        allocator,
        cmdline_path=settings.cmdline_path,
        heap_stats_limit=settings.heap_stats_limit,
    )
    symbols = SymbolResolver(server, symbolizer_factory)
    return PProfInspector(
        server,
        cpu=cpu,
        heap=heap,
        stats=stats,
        symbols=symbols,
        prefix=settings.path_prefix,
        profile_content_type=_CPU_CONTENT_TYPES[settings.cpu_profile_format],
    )
