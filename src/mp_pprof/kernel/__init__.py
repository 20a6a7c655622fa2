"""Kernel – framework-agnostic errors and value types."""

from mp_pprof.kernel.errors import (
    ApplicationError,
    BaseError,
    DomainError,
    InfrastructureError,
    InvalidParameterError,
    MethodNotAllowedError,
    ReadError,
    SamplerStartError,
    ValidationError,
)
from mp_pprof.kernel.types import Err, Ok, Result

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "Err",
    "InfrastructureError",
    "InvalidParameterError",
    "MethodNotAllowedError",
    "Ok",
    "ReadError",
    "Result",
    "SamplerStartError",
    "ValidationError",
]
