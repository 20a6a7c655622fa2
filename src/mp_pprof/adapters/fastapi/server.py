"""FastAPI adapter – FastAPIHttpServer, the HttpServer port over an APIRouter.

Each inbound request gets a :data:`ConnectionId` and a pending response.
The endpoint coroutine hands the request to the inspector handler and then
awaits the pending response, which resolves when some thread calls
:meth:`FastAPIHttpServer.close` (or ``send_error``) for that id.
"""
from __future__ import annotations

import asyncio
import itertools
import threading

from fastapi import APIRouter, Request
from fastapi.responses import Response

from mp_pprof.inspector.http import TEXT_PLAIN, ConnectionId, Handler, HttpRequest
from mp_pprof.observability.logging import get_logger

__all__ = ["FastAPIHttpServer"]

log = get_logger(__name__)

# Method policy belongs to the handlers (400, not 405).
_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class _PendingResponse:
    def __init__(self, loop: asyncio.AbstractEventLoop, content_type: str) -> None:
        self._loop = loop
        self._future: asyncio.Future[Response] = loop.create_future()
        self._chunks: list[bytes] = []
        self.content_type = content_type
        self.status = 200
        self.closed = False

    def write(self, data: bytes) -> None:
        self._chunks.append(data)

    def resolve(self) -> None:
        response = Response(
            content=b"".join(self._chunks),
            status_code=self.status,
            media_type=self.content_type,
            headers={"Connection": "close"},
        )
        self._loop.call_soon_threadsafe(self._set_result, response)

    def _set_result(self, response: Response) -> None:
        if not self._future.done():
            self._future.set_result(response)

    async def wait(self) -> Response:
        return await self._future


class FastAPIHttpServer:
    """:class:`~mp_pprof.inspector.http.HttpServer` backed by a FastAPI router.

    Parameters
    ----------
    router:
        Router to add routes to.  A fresh :class:`APIRouter` by default;
        include it in an app with ``app.include_router(server.router)``.
    """

    def __init__(self, router: APIRouter | None = None) -> None:
        self.router = router or APIRouter()
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._pending: dict[ConnectionId, _PendingResponse] = {}

    @property
    def open_connections(self) -> int:
        with self._lock:
            return len(self._pending)

    def register(self, path: str, handler: Handler, content_type: str = TEXT_PLAIN) -> None:
        async def endpoint(request: Request) -> Response:
            return await self._dispatch(request, handler, content_type)

        self.router.add_api_route(
            path,
            endpoint,
            methods=_ALL_METHODS,
            response_model=None,
            include_in_schema=False,
            name=path,
        )

    async def _dispatch(self, request: Request, handler: Handler, content_type: str) -> Response:
        pending = _PendingResponse(asyncio.get_running_loop(), content_type)
        with self._lock:
            connection_id = next(self._ids)
            self._pending[connection_id] = pending

        try:
            handler(
                HttpRequest(
                    connection_id=connection_id,
                    method=request.method,
                    path=request.url.path,
                    params=dict(request.query_params),
                    body=await request.body(),
                )
            )
            return await pending.wait()
        finally:
            with self._lock:
                self._pending.pop(connection_id, None)

    def _lookup(self, connection_id: ConnectionId) -> _PendingResponse | None:
        pending = self._pending.get(connection_id)
        if pending is None or pending.closed:
            log.debug("connection_gone", connection_id=connection_id)
            return None
        return pending

    def send(self, connection_id: ConnectionId, data: bytes) -> None:
        with self._lock:
            pending = self._lookup(connection_id)
            if pending is not None:
                pending.write(data)

    def send_error(self, connection_id: ConnectionId, status: int, message: str) -> None:
        with self._lock:
            pending = self._lookup(connection_id)
            if pending is None:
                return
            pending.status = status
            pending.content_type = TEXT_PLAIN
            pending.write(message.encode("utf-8"))
            pending.closed = True
        pending.resolve()

    def close(self, connection_id: ConnectionId) -> None:
        with self._lock:
            pending = self._lookup(connection_id)
            if pending is None:
                return
            pending.closed = True
        pending.resolve()
