"""Infrastructure errors — profiler and I/O failures."""

from __future__ import annotations

from typing import Any

from mp_pprof.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Instrumentation / I/O failure that is not a client input error."""

    default_code = "infrastructure_error"
    http_status = 503


class SamplerStartError(InfrastructureError):
    """A CPU sampler or heap profiler refused to start."""

    default_code = "sampler_start_failed"

    def __init__(
        self,
        sampler: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not start '{sampler}'", **kwargs)
        self.sampler = sampler


class ReadError(InfrastructureError):
    """A profile file or instrumentation source could not be read."""

    default_code = "read_failed"

    def __init__(
        self,
        source: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not read '{source}'", **kwargs)
        self.source = source


__all__ = [
    "InfrastructureError",
    "ReadError",
    "SamplerStartError",
]
