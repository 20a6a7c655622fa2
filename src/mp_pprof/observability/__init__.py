"""Observability – structured logging and profiling collaborators."""

from mp_pprof.observability.logging import JsonLoggerFactory, get_logger

__all__ = ["JsonLoggerFactory", "get_logger"]
