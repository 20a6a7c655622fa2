"""Config – 12-factor settings and loaders."""

from mp_pprof.config.settings import (
    EnvSettingsLoader,
    InspectorSettings,
    Settings,
    SettingsLoader,
)
from mp_pprof.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InspectorSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
