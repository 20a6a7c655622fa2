"""Domain errors — invalid client input."""

from __future__ import annotations

from typing import Any

from mp_pprof.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a request violates an input rule."""

    default_code = "domain_error"
    http_status = 422


class ValidationError(DomainError):
    """Input data does not meet validation rules."""

    default_code = "validation_error"
    http_status = 400


class InvalidParameterError(ValidationError):
    """A query parameter is unparsable or outside its allowed range."""

    default_code = "invalid_parameter"

    def __init__(
        self,
        parameter: str,
        value: Any,
        message: str = "Invalid Parameter",
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("detail", {"parameter": parameter, "value": value})
        super().__init__(message, **kwargs)
        self.parameter = parameter
        self.value = value


__all__ = [
    "DomainError",
    "InvalidParameterError",
    "ValidationError",
]
