"""Inspector – profiling-session coordinators.

Many concurrent requests for a CPU (or heap) profile share one underlying
profiling run.  The first requester starts the profiler and schedules a
one-shot completion task; everyone who arrives before that task swaps the
waiter set out joins the same run and receives the same bytes.

Locking
-------
Each coordinator owns one :class:`threading.Lock`.  It guards the session
state, the waiter set and every call into the profiler, so

* two concurrent first joiners cannot start two runs or schedule two tasks;
* a joiner racing the completion task either lands before the swap (and
  gets this run's body) or after it (and starts the next run);
* a fresh run cannot overwrite the profile file before the finishing run
  has read it.

Sending to waiters happens outside the lock.
"""
from __future__ import annotations

import abc
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import ClassVar

from mp_pprof.application.scheduler import Scheduler
from mp_pprof.inspector.http import ConnectionId, HttpRequest, HttpServer, reject, reply
from mp_pprof.inspector.params import (
    DEFAULT_PROFILE_SECONDS,
    MAX_PROFILE_SECONDS,
    parse_profile_seconds,
)
from mp_pprof.inspector.session import ProfileSession, SessionSnapshot, SessionState
from mp_pprof.kernel.errors import MethodNotAllowedError, SamplerStartError
from mp_pprof.observability.logging import get_logger
from mp_pprof.observability.profiling import (
    AllocatorStats,
    CpuSampler,
    HeapProfiler,
    read_file,
)

__all__ = [
    "CpuProfileCoordinator",
    "HEAP_PROFILE_SECONDS",
    "HeapProfileCoordinator",
    "ProfileSessionCoordinator",
]

log = get_logger(__name__)

HEAP_PROFILE_SECONDS = 30


class ProfileSessionCoordinator(abc.ABC):
    """Batch requesters into one timed profiling run and fan out its result."""

    kind: ClassVar[str] = "profile"

    def __init__(self, server: HttpServer, scheduler: Scheduler) -> None:
        self._server = server
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._session = ProfileSession()

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._session.snapshot()

    @abc.abstractmethod
    def _start_profiler(self) -> None:
        """Start the underlying profiler; may raise :class:`SamplerStartError`."""

    @abc.abstractmethod
    def _finish_profiler(self) -> bytes:
        """Stop the underlying profiler and return the body for every waiter."""

    def _join(self, connection_id: ConnectionId, window_seconds: float) -> None:
        with self._lock:
            if self._session.state is SessionState.IDLE:
                self._scheduler.call_later(
                    window_seconds, self._complete, name=f"{self.kind}-profile-complete"
                )
                try:
                    self._start_profiler()
                except SamplerStartError as exc:
                    log.warning("profiler_start_failed", kind=self.kind, **exc.to_dict())
                self._session.begin(window_seconds, connection_id)
                log.info(
                    "profile_session_started",
                    kind=self.kind,
                    window_seconds=window_seconds,
                    generation=self._session.generation,
                )
                return

            if window_seconds != self._session.window_seconds:
                log.debug(
                    "profile_window_ignored",
                    kind=self.kind,
                    requested_seconds=window_seconds,
                    window_seconds=self._session.window_seconds,
                )
            self._session.join(connection_id)

    def _complete(self) -> None:
        with self._lock:
            try:
                body = self._finish_profiler()
            except Exception:  # noqa: BLE001
                log.exception("profile_finish_failed", kind=self.kind)
                body = b""
            generation = self._session.generation
            waiters = self._session.drain()

        log.info(
            "profile_session_completed",
            kind=self.kind,
            generation=generation,
            waiters=len(waiters),
            bytes=len(body),
        )
        for connection_id in waiters:
            self._server.send(connection_id, body)
            self._server.close(connection_id)


class CpuProfileCoordinator(ProfileSessionCoordinator):
    """``/pprof/profile`` — CPU profile over a caller-chosen window."""

    kind = "cpu"

    def __init__(
        self,
        server: HttpServer,
        scheduler: Scheduler,
        sampler: CpuSampler,
        profile_file: str | Path = "profile.dat",
        default_seconds: int = DEFAULT_PROFILE_SECONDS,
        max_seconds: int = MAX_PROFILE_SECONDS,
    ) -> None:
        super().__init__(server, scheduler)
        self._sampler = sampler
        self._profile_file = Path(profile_file)
        self._default_seconds = default_seconds
        self._max_seconds = max_seconds

    def request_profile(self, request: HttpRequest) -> None:
        if request.method != "GET":
            reject(self._server, request, MethodNotAllowedError(request.method, "GET"))
            return

        seconds = parse_profile_seconds(
            request.param("seconds"), self._default_seconds, self._max_seconds
        )
        if seconds.is_err():
            reject(self._server, request, seconds.error)
            return

        self._join(request.connection_id, seconds.value)

    def _start_profiler(self) -> None:
        self._sampler.start(self._profile_file)

    def _finish_profiler(self) -> bytes:
        try:
            self._sampler.flush()
        finally:
            self._sampler.stop()
        return read_file(self._profile_file)


class HeapProfileCoordinator(ProfileSessionCoordinator):
    """``/pprof/heap`` — immediate sample or a fixed-window heap profile.

    The continuous-sampling flag is the environment variable named by
    *continuous_env*, read on every request.
    """

    kind = "heap"

    def __init__(
        self,
        server: HttpServer,
        scheduler: Scheduler,
        profiler: HeapProfiler,
        allocator: AllocatorStats,
        heap_profile_file: str | Path = "/tmp/heap-profile.dat",
        window_seconds: int = HEAP_PROFILE_SECONDS,
        continuous_env: str = "PYTHONTRACEMALLOC",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(server, scheduler)
        self._profiler = profiler
        self._allocator = allocator
        self._heap_profile_file = Path(heap_profile_file)
        self._window_seconds = window_seconds
        self._continuous_env = continuous_env
        self._environ = environ

    def continuous_sampling(self) -> bool:
        environ = os.environ if self._environ is None else self._environ
        return bool(environ.get(self._continuous_env))

    def request_heap_profile(self, request: HttpRequest) -> None:
        if request.method != "GET":
            reject(self._server, request, MethodNotAllowedError(request.method, "GET"))
            return

        if self.continuous_sampling():
            reply(self._server, request, self._allocator.heap_sample().encode("utf-8"))
            return

        self._join(request.connection_id, self._window_seconds)

    def _start_profiler(self) -> None:
        self._profiler.start(self._heap_profile_file)

    def _finish_profiler(self) -> bytes:
        try:
            return self._profiler.dump().encode("utf-8")
        finally:
            self._profiler.stop()
