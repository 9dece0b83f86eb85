"""Observability – logging and decision auditing."""

from roleacl.observability.logging import (
    AuditLogger,
    AuditOutcome,
    JsonLoggerFactory,
    SensitiveFieldsFilter,
    get_logger,
)

__all__ = [
    "AuditLogger",
    "AuditOutcome",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
]
