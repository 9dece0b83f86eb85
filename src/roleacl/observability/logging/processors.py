"""Observability – structlog helpers.

``get_logger(name)`` returns a bound structlog logger; ``bind_query`` is a
processor that flattens a ``query`` entry into role/resource/action fields so
decision logs stay greppable.
"""
from __future__ import annotations

from typing import Any

import structlog


def bind_query(
    logger: Any,           # noqa: ARG001
    method_name: str,      # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor expanding a ``query=QueryInfo`` keyword.

    Usage::

        structlog.configure(processors=[bind_query, ...])
    """
    query = event_dict.pop("query", None)
    if query is not None:
        event_dict.setdefault("roles", list(getattr(query, "roles", ())))
        event_dict.setdefault("resource", getattr(query, "resource", None))
        event_dict.setdefault("action", getattr(query, "action", None))
        possession = getattr(query, "possession", None)
        if possession is not None:
            event_dict.setdefault("possession", str(possession))
    return event_dict


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


__all__ = ["bind_query", "get_logger"]
