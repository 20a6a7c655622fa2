"""Inspector – the HTTP transport port the handlers talk to."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable

from mp_pprof.kernel.errors import BaseError
from mp_pprof.observability.logging import get_logger

__all__ = [
    "ConnectionId",
    "Handler",
    "HttpRequest",
    "HttpServer",
    "TEXT_PLAIN",
    "reject",
    "reply",
]

log = get_logger(__name__)

TEXT_PLAIN = "text/plain; charset=utf-8"

type ConnectionId = int


@dataclass(frozen=True)
class HttpRequest:
    """What a handler sees of an inbound request."""

    connection_id: ConnectionId
    method: str
    path: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def param(self, name: str, default: str = "") -> str:
        return self.params.get(name, default)


type Handler = Callable[[HttpRequest], None]


@runtime_checkable
class HttpServer(Protocol):
    """Port: the slice of an HTTP server the inspector needs.

    Handlers never return a response.  They push bytes with :meth:`send` and
    finish with :meth:`close`, possibly long after the handler returned and
    from another thread.  :meth:`send_error` answers with an error status
    and closes in one step.
    """

    def register(self, path: str, handler: Handler, content_type: str = TEXT_PLAIN) -> None: ...
    def send(self, connection_id: ConnectionId, data: bytes) -> None: ...
    def send_error(self, connection_id: ConnectionId, status: int, message: str) -> None: ...
    def close(self, connection_id: ConnectionId) -> None: ...


def reply(server: HttpServer, request: HttpRequest, body: bytes) -> None:
    """Send the whole body and close the connection."""
    server.send(request.connection_id, body)
    server.close(request.connection_id)


def reject(server: HttpServer, request: HttpRequest, error: BaseError) -> None:
    """Answer a client-input error with its status and message."""
    log.info(
        "request_rejected",
        path=request.path,
        method=request.method,
        status=error.http_status,
        **error.to_dict(),
    )
    server.send_error(request.connection_id, error.http_status, error.message)
