"""FastAPI adapter – app factory and mountable pprof router."""
from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, FastAPI

from mp_pprof.adapters.fastapi.server import FastAPIHttpServer
from mp_pprof.application.scheduler import APSchedulerAdapter, Scheduler
from mp_pprof.config.settings import EnvSettingsLoader, InspectorSettings
from mp_pprof.inspector import PProfInspector, build_inspector
from mp_pprof.observability.logging import JsonLoggerFactory


def _wire(
    settings: InspectorSettings | None,
    scheduler: Scheduler,
    collaborators: dict[str, Any],
) -> tuple[FastAPIHttpServer, PProfInspector, InspectorSettings]:
    settings = settings or EnvSettingsLoader().load(InspectorSettings)
    server = FastAPIHttpServer()
    inspector = build_inspector(server, scheduler, settings, **collaborators)
    return server, inspector, settings


def FastAPIPProfRouter(
    settings: InspectorSettings | None = None,
    *,
    scheduler: Scheduler | None = None,
    **collaborators: Any,
) -> APIRouter:
    """Return a router serving the pprof endpoints, for an existing app.

    Parameters
    ----------
    settings:
        Inspector settings; loaded from ``PPROF_*`` environment variables
        when omitted.
    scheduler:
        Timer for profile windows; an :class:`APSchedulerAdapter` by default.
    **collaborators:
        Overrides forwarded to :func:`~mp_pprof.inspector.build_inspector`
        (``cpu_sampler``, ``heap_profiler``, ``allocator``,
        ``symbolizer_factory``, ``environ``).
    """
    server, _, _ = _wire(settings, scheduler or APSchedulerAdapter(), collaborators)
    return server.router


def create_app(
    settings: InspectorSettings | None = None,
    *,
    scheduler: Scheduler | None = None,
    configure_logging: bool = True,
    **collaborators: Any,
) -> FastAPI:
    """Build a standalone diagnostics app.

    The wired :class:`PProfInspector` is exposed as ``app.state.pprof``.
    When no *scheduler* is given the app owns an :class:`APSchedulerAdapter`
    and shuts it down with the app's lifespan.
    """
    owned = APSchedulerAdapter() if scheduler is None else None
    server, inspector, settings = _wire(settings, scheduler or owned, collaborators)
    if configure_logging:
        JsonLoggerFactory.configure(settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if owned is not None:
            owned.shutdown()

    app = FastAPI(
        title="mp-pprof",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.include_router(server.router)
    app.state.pprof = inspector
    app.state.scheduler = scheduler or owned
    return app


__all__ = ["FastAPIPProfRouter", "create_app"]
