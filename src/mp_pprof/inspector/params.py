"""Inspector – request parameter parsing."""
from __future__ import annotations

import re

from mp_pprof.kernel.errors import InvalidParameterError
from mp_pprof.kernel.types import Err, Ok, Result

__all__ = [
    "DEFAULT_PROFILE_SECONDS",
    "MAX_PROFILE_SECONDS",
    "parse_address",
    "parse_profile_seconds",
]

DEFAULT_PROFILE_SECONDS = 30
MAX_PROFILE_SECONDS = 600

_ADDRESS_MASK = (1 << 64) - 1
_DECIMAL_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")
_HEX_PREFIX = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")


def parse_profile_seconds(
    raw: str | None,
    default: int = DEFAULT_PROFILE_SECONDS,
    maximum: int = MAX_PROFILE_SECONDS,
) -> Result[int, InvalidParameterError]:
    """Parse the ``seconds`` query parameter.

    Empty or missing means *default*.  Otherwise only the leading base-10
    integer counts: leading whitespace and a sign are accepted and trailing
    characters are ignored, so ``"5s"`` is 5 and ``"1.5"`` is 1.  No leading
    digits, or a value outside ``[0, maximum]``, is an ``Err``.
    """
    if not raw:
        return Ok(default)
    match = _DECIMAL_PREFIX.match(raw)
    if match is None:
        return Err(InvalidParameterError("seconds", raw, "Invalid Profile Seconds Parameter"))
    digits = match.group(1)
    # overflow
    if len(digits.lstrip("+-").lstrip("0")) > 10:
        return Err(InvalidParameterError("seconds", raw, "Invalid Profile Seconds Parameter"))
    seconds = int(digits)
    if seconds < 0 or seconds > maximum:
        return Err(InvalidParameterError("seconds", raw, "Invalid Profile Seconds Parameter"))
    return Ok(seconds)


def parse_address(token: str) -> int:
    """Parse a hex address the way ``strtoull(token, NULL, 16)`` does.

    Leading whitespace, a sign and a ``0x`` prefix are accepted; parsing
    stops at the first non-hex character; no digits at all gives ``0``.
    Values past 64 bits saturate; negative values wrap.
    """
    match = _HEX_PREFIX.match(token)
    if match is None or not match.group(2):
        return 0
    value = min(int(match.group(2), 16), _ADDRESS_MASK)
    if match.group(1) == "-":
        value = -value
    return value & _ADDRESS_MASK
