"""Application-layer errors — cross-cutting concerns at endpoint level."""

from __future__ import annotations

from typing import Any

from mp_pprof.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class MethodNotAllowedError(ApplicationError):
    """The endpoint does not accept the request's HTTP method.

    Reported as ``400`` rather than ``405``: pprof clients only look at the
    2xx/non-2xx split.
    """

    default_code = "method_not_allowed"
    http_status = 400

    def __init__(
        self,
        method: str,
        allowed: str,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("detail", {"method": method, "allowed": allowed})
        super().__init__(f"Only accept {allowed.capitalize()} method", **kwargs)
        self.method = method
        self.allowed = allowed


__all__ = [
    "ApplicationError",
    "MethodNotAllowedError",
]
