"""Config settings – InspectorSettings for the pprof endpoints."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from mp_pprof.config.settings.base import Settings
from mp_pprof.config.validation import InvalidSettingValueError

_CPU_PROFILE_FORMATS = frozenset({"text", "speedscope", "html"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclasses.dataclass
class InspectorSettings(Settings):
    """Runtime knobs for the pprof inspector, read from ``PPROF_*`` variables.

    ``continuous_heap_env`` names the environment variable whose presence
    means the process already samples its heap continuously; the heap
    endpoint then answers immediately instead of opening a window.
    """

    _prefix: ClassVar[str] = "PPROF"

    path_prefix: str = "/pprof"
    profile_file: str = "profile.dat"
    heap_profile_file: str = "/tmp/heap-profile.dat"
    default_profile_seconds: int = 30
    max_profile_seconds: int = 600
    heap_profile_seconds: int = 30
    continuous_heap_env: str = "PYTHONTRACEMALLOC"
    cmdline_path: str = "/proc/self/cmdline"
    heap_stats_limit: int = 64 * 1024
    heap_stack_depth: int = 16
    cpu_sampling_interval: float = 0.001
    cpu_profile_format: str = "text"
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.max_profile_seconds < 0:
            raise InvalidSettingValueError(
                "max_profile_seconds", self.max_profile_seconds, "must be >= 0"
            )
        if not 0 <= self.default_profile_seconds <= self.max_profile_seconds:
            raise InvalidSettingValueError(
                "default_profile_seconds",
                self.default_profile_seconds,
                f"must be within [0, {self.max_profile_seconds}]",
            )
        if self.heap_profile_seconds < 0:
            raise InvalidSettingValueError(
                "heap_profile_seconds", self.heap_profile_seconds, "must be >= 0"
            )
        if self.heap_stats_limit <= 0:
            raise InvalidSettingValueError(
                "heap_stats_limit", self.heap_stats_limit, "must be positive"
            )
        if self.heap_stack_depth <= 0:
            raise InvalidSettingValueError(
                "heap_stack_depth", self.heap_stack_depth, "must be positive"
            )
        if self.cpu_sampling_interval <= 0:
            raise InvalidSettingValueError(
                "cpu_sampling_interval", self.cpu_sampling_interval, "must be positive"
            )
        if self.cpu_profile_format not in _CPU_PROFILE_FORMATS:
            raise InvalidSettingValueError(
                "cpu_profile_format",
                self.cpu_profile_format,
                f"expected one of {sorted(_CPU_PROFILE_FORMATS)}",
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidSettingValueError(
                "log_level", self.log_level, f"expected one of {sorted(_LOG_LEVELS)}"
            )
        if self.path_prefix and not self.path_prefix.startswith("/"):
            raise InvalidSettingValueError(
                "path_prefix", self.path_prefix, "must start with '/'"
            )
        self.path_prefix = self.path_prefix.rstrip("/")


__all__ = ["InspectorSettings"]
