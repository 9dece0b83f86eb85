"""Observability – structured logging helpers."""
from roleacl.observability.logging.audit import AuditLogger, AuditOutcome
from roleacl.observability.logging.factory import JsonLoggerFactory
from roleacl.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from roleacl.observability.logging.processors import bind_query, get_logger

__all__ = [
    "AuditLogger",
    "AuditOutcome",
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "bind_query",
    "get_logger",
]
