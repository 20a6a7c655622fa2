"""Observability – CPU sampling backed by ``pyinstrument``."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pyinstrument import Profiler
from pyinstrument.renderers import SpeedscopeRenderer

from mp_pprof.kernel.errors import SamplerStartError
from mp_pprof.observability.logging import get_logger

__all__ = [
    "CpuSampler",
    "PyinstrumentCpuSampler",
]

log = get_logger(__name__)


@runtime_checkable
class CpuSampler(Protocol):
    """Port: process-wide CPU sampler that persists its output to a file."""

    def start(self, path: str | Path) -> None:
        """Begin sampling; raise :class:`SamplerStartError` on failure."""
        ...

    def flush(self) -> None:
        """Write everything sampled so far to the path given to ``start``."""
        ...

    def stop(self) -> None: ...


class PyinstrumentCpuSampler:
    """CPU sampler backed by ``pyinstrument.Profiler``.

    pyinstrument samples the thread that called :meth:`start`; with the
    FastAPI adapter that is the event-loop thread, which is where request
    handlers and completion tasks run.

    Parameters
    ----------
    interval:
        Sampling interval in seconds.
    output_format:
        ``"text"``, ``"speedscope"`` (JSON for speedscope.app) or ``"html"``.
    """

    def __init__(self, interval: float = 0.001, output_format: str = "text") -> None:
        self._interval = interval
        self._format = output_format
        self._profiler: Profiler | None = None
        self._path: Path | None = None

    @property
    def is_running(self) -> bool:
        return self._profiler is not None and self._profiler.is_running

    def start(self, path: str | Path) -> None:
        if self.is_running:
            raise SamplerStartError("pyinstrument", "CPU sampler already running")
        self._path = Path(path)
        try:
            self._path.unlink(missing_ok=True)
            profiler = Profiler(interval=self._interval, async_mode="disabled")
            profiler.start()
        except Exception as exc:  # noqa: BLE001
            self._profiler = None
            raise SamplerStartError("pyinstrument", str(exc), cause=exc) from exc
        self._profiler = profiler

    def flush(self) -> None:
        profiler = self._profiler
        if profiler is None or self._path is None:
            return
        if profiler.is_running:
            profiler.stop()
        if profiler.last_session is None:
            return
        self._path.write_text(self._render(profiler), encoding="utf-8")
        log.debug("cpu_profile_flushed", path=str(self._path))

    def stop(self) -> None:
        profiler, self._profiler = self._profiler, None
        if profiler is not None and profiler.is_running:
            profiler.stop()

    def _render(self, profiler: Profiler) -> str:
        if self._format == "speedscope":
            return profiler.output(renderer=SpeedscopeRenderer())
        if self._format == "html":
            return profiler.output_html()
        output: Any = profiler.output_text(unicode=True, color=False)
        return str(output)
