"""Observability – AuditLogger.

A dedicated structured-log sink for access decisions.
"""
from __future__ import annotations

import datetime
from enum import Enum
from typing import Any, Iterable, Mapping

from roleacl.observability.logging.filters import SensitiveFieldsFilter
from roleacl.observability.logging.processors import get_logger


class AuditOutcome(str, Enum):
    """Standardised audit outcomes."""

    GRANTED = "granted"
    DENIED = "denied"
    ERROR = "error"


class AuditLogger:
    """Structured-log sink for permission decisions.

    All audit entries are emitted at ``WARNING`` level so they pass through
    even restrictive log-level filters.

    Parameters
    ----------
    service:
        Logical service name injected into every audit entry.
    logger:
        Underlying structlog logger. Defaults to ``roleacl.audit``.
    redactor:
        Filter applied to the request context before it is logged.
    """

    def __init__(
        self,
        service: str = "roleacl",
        logger: Any = None,
        redactor: SensitiveFieldsFilter | None = None,
    ) -> None:
        self._service = service
        self._log = logger if logger is not None else get_logger("roleacl.audit")
        self._redactor = redactor or SensitiveFieldsFilter()

    def log_decision(
        self,
        roles: Iterable[str],
        resource: str | None,
        action: str | None,
        outcome: AuditOutcome | str,
        *,
        attributes: Iterable[str] = (),
        context: Mapping[str, Any] | None = None,
        **extra: Any,
    ) -> None:
        """Record one access decision.

        Parameters
        ----------
        roles:
            Roles the query was issued for (before inheritance expansion).
        resource, action:
            What was asked for.
        outcome:
            :class:`AuditOutcome` or plain string.
        attributes:
            Attribute globs that were granted.
        context:
            Request context; sensitive keys are redacted.
        **extra:
            Additional structured fields.
        """
        entry: dict[str, Any] = {
            "service": self._service,
            "roles": list(roles),
            "resource": resource,
            "action": action,
            "outcome": outcome.value if isinstance(outcome, AuditOutcome) else str(outcome),
            "attributes": list(attributes),
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            **extra,
        }
        if context:
            entry["context"] = self._redactor.redact_deep(dict(context))
        self._log.warning("audit.decision", **entry)


__all__ = ["AuditLogger", "AuditOutcome"]
