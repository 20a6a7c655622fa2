"""Inspector – ``/pprof/symbol`` address resolution."""
from __future__ import annotations

from typing import Callable

from mp_pprof.inspector.http import HttpRequest, HttpServer, reject, reply
from mp_pprof.inspector.params import parse_address
from mp_pprof.kernel.errors import MethodNotAllowedError
from mp_pprof.observability.profiling import PythonSymbolizer, Symbolizer

__all__ = ["NUM_SYMBOLS_PLACEHOLDER", "SymbolResolver"]

# pprof only checks that the count is non-zero before POSTing addresses.
NUM_SYMBOLS_PLACEHOLDER = b"num_symbols: 1\n"


class SymbolResolver:
    """GET reports a symbol table exists; POST resolves ``+``-joined addresses.

    One symbolizer is built per POST, so every address in a request is
    resolved against the same snapshot of live objects.
    """

    def __init__(
        self,
        server: HttpServer,
        symbolizer_factory: Callable[[], Symbolizer] = PythonSymbolizer,
    ) -> None:
        self._server = server
        self._symbolizer_factory = symbolizer_factory

    def handle(self, request: HttpRequest) -> None:
        if request.method == "GET":
            reply(self._server, request, NUM_SYMBOLS_PLACEHOLDER)
            return
        if request.method != "POST":
            reject(self._server, request, MethodNotAllowedError(request.method, "POST"))
            return

        symbolizer = self._symbolizer_factory()
        lines: list[str] = []
        for token in request.body.decode("utf-8", errors="replace").split("+"):
            name = symbolizer.resolve(parse_address(token))
            lines.append(f"{token}\t{name or 'unknown'}\n")
        reply(self._server, request, "".join(lines).encode("utf-8"))
