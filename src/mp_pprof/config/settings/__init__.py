"""Config settings – 12-factor env-based configuration."""
from mp_pprof.config.settings.base import Settings
from mp_pprof.config.settings.inspector import InspectorSettings
from mp_pprof.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = ["EnvSettingsLoader", "InspectorSettings", "Settings", "SettingsLoader"]
