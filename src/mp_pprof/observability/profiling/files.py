"""Observability – tolerant file reads for profile output and /proc records."""
from __future__ import annotations

from pathlib import Path

from mp_pprof.kernel.errors import ReadError
from mp_pprof.observability.logging import get_logger

__all__ = ["read_file"]

log = get_logger(__name__)


def read_file(path: str | Path) -> bytes:
    """Return the file's bytes, or ``b""`` when it cannot be read.

    The failure is logged as a :class:`ReadError`; callers answer with an
    empty body instead of an error status.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        error = ReadError(str(path), cause=exc)
        log.warning("read_failed", **error.to_dict())
        return b""
