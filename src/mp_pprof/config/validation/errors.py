"""Config validation – errors raised while loading ``PPROF_*`` settings.

Every error carries the field and, when it came from the environment, the
variable name in :attr:`BaseError.detail`, so a startup failure logs as one
structured line.
"""
from __future__ import annotations

from mp_pprof.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Inspector settings could not be loaded or failed validation."""

    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    default_code = "missing_setting"

    def __init__(self, env_key: str) -> None:
        super().__init__(
            f"Environment variable {env_key} is required",
            detail={"env_key": env_key},
        )
        self.env_key = env_key


class InvalidSettingValueError(ConfigError):
    """A setting is present but unusable, e.g. ``PPROF_HEAP_STATS_LIMIT=0``."""

    default_code = "invalid_setting"

    def __init__(
        self,
        field: str,
        value: object,
        reason: str,
        *,
        env_key: str | None = None,
    ) -> None:
        super().__init__(
            f"{env_key or field}={value!r}: {reason}",
            detail={"field": field, "value": value, "reason": reason, "env_key": env_key},
        )
        self.field = field
        self.value = value
        self.reason = reason
        self.env_key = env_key


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
