"""Inspector – pprof-style runtime diagnostics over an HTTP port.

``build_inspector(server, scheduler, settings)`` registers::

    /pprof/profile        CPU profile after a ``seconds`` window
    /pprof/heap           heap sample, or a 30 s heap profile
    /pprof/heapstats      allocator summary
    /pprof/heaphistogram  live-block size histogram
    /pprof/growth         heap growth stacks
    /pprof/cmdline        process command line
    /pprof/symbol         address -> name table
"""
from mp_pprof.inspector.coordinator import (
    CpuProfileCoordinator,
    HeapProfileCoordinator,
    ProfileSessionCoordinator,
)
from mp_pprof.inspector.http import ConnectionId, Handler, HttpRequest, HttpServer
from mp_pprof.inspector.params import parse_address, parse_profile_seconds
from mp_pprof.inspector.registry import PProfInspector, build_inspector
from mp_pprof.inspector.responders import StatResponders, render_histogram
from mp_pprof.inspector.session import ProfileSession, SessionSnapshot, SessionState
from mp_pprof.inspector.symbols import NUM_SYMBOLS_PLACEHOLDER, SymbolResolver

__all__ = [
    "NUM_SYMBOLS_PLACEHOLDER",
    "ConnectionId",
    "CpuProfileCoordinator",
    "Handler",
    "HeapProfileCoordinator",
    "HttpRequest",
    "HttpServer",
    "PProfInspector",
    "ProfileSession",
    "ProfileSessionCoordinator",
    "SessionSnapshot",
    "SessionState",
    "StatResponders",
    "SymbolResolver",
    "build_inspector",
    "parse_address",
    "parse_profile_seconds",
    "render_histogram",
]
