"""Config – settings and loaders."""

from roleacl.config.settings import (
    AccessControlSettings,
    EnvSettingsLoader,
    Settings,
    SettingsLoader,
    SettingsValidator,
)
from roleacl.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "AccessControlSettings",
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "SettingsValidator",
]
