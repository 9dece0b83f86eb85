"""Config settings – environment-driven configuration."""
from roleacl.config.settings.access import AccessControlSettings
from roleacl.config.settings.base import Settings
from roleacl.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from roleacl.config.settings.validator import SettingsValidator

__all__ = [
    "AccessControlSettings",
    "EnvSettingsLoader",
    "Settings",
    "SettingsLoader",
    "SettingsValidator",
]
