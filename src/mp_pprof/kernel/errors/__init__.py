"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError            (domain.py)
    │   └── ValidationError
    │       └── InvalidParameterError
    ├── ApplicationError       (application.py)
    │   └── MethodNotAllowedError
    └── InfrastructureError    (infrastructure.py)
        ├── SamplerStartError
        └── ReadError
"""

from mp_pprof.kernel.errors.application import ApplicationError, MethodNotAllowedError
from mp_pprof.kernel.errors.base import BaseError
from mp_pprof.kernel.errors.domain import DomainError, InvalidParameterError, ValidationError
from mp_pprof.kernel.errors.infrastructure import (
    InfrastructureError,
    ReadError,
    SamplerStartError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "InfrastructureError",
    "InvalidParameterError",
    "MethodNotAllowedError",
    "ReadError",
    "SamplerStartError",
    "ValidationError",
]
