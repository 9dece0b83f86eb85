"""Config settings – AccessControlSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from roleacl.config.settings.base import Settings
from roleacl.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class AccessControlSettings(Settings):
    """Runtime switches for :class:`~roleacl.access.control.AccessControl`.

    Loaded from ``ROLEACL_*`` environment variables, e.g.
    ``ROLEACL_AUDIT_DECISIONS=true``. With ``configure_logging`` on, the
    engine installs the JSON log pipeline at ``log_level`` when it is built.
    """

    _prefix: ClassVar[str] = "ROLEACL"

    audit_decisions: bool = False
    audit_service: str = "roleacl"
    configure_logging: bool = False
    log_level: str = "INFO"

    def _validate(self) -> None:
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            raise InvalidSettingValueError("log_level", self.log_level, "unknown logging level")
        self.log_level = self.log_level.upper()


__all__ = ["AccessControlSettings"]
