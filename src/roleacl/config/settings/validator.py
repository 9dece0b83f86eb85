"""Config settings – SettingsValidator."""
from __future__ import annotations

import dataclasses

from roleacl.config.settings.base import Settings


class SettingsValidator:
    """Collect problems in a populated settings instance without raising."""

    def validate(self, settings: Settings) -> list[str]:
        """Return a list of validation error messages."""
        errors: list[str] = []
        for field in dataclasses.fields(settings):
            value = getattr(settings, field.name)
            if value is None and field.default is dataclasses.MISSING:
                errors.append(f"{field.name} is required but None")
            elif isinstance(value, str) and not value.strip():
                errors.append(f"{field.name} must not be blank")
        return errors


__all__ = ["SettingsValidator"]
