"""Query value object."""

from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from roleacl.access.grants.models import Possession, split_action
from roleacl.access.grants.normalize import role_names
from roleacl.kernel.errors import InvalidGrantsFormatError, MissingRequiredFieldError


@dataclasses.dataclass(frozen=True)
class QueryInfo:
    """Who asks for what: roles, resource, action and the request context.

    ``action`` holds the bare verb; a ``"read:own"`` input is split into
    ``action="read"`` and ``possession=Possession.OWN``. An explicit
    ``possession`` wins over the suffix.
    """

    roles: tuple[str, ...] = ()
    resource: str | None = None
    action: str | None = None
    possession: Possession | None = None
    context: Any = None
    skip_conditions: bool = False

    @classmethod
    def of(cls, value: "QueryInfo | Mapping[str, Any] | str | list[str] | tuple[str, ...] | None") -> "QueryInfo":
        """Build a query from a mapping (``role``, ``resource``, ``action``,
        ``possession``, ``context``, ``skip_conditions``), a role or list of
        roles, or return an existing :class:`QueryInfo` unchanged."""
        if isinstance(value, QueryInfo):
            return value
        if value is None:
            return cls()
        if isinstance(value, (str, list, tuple)):
            return cls(roles=tuple(role_names(value)))
        if not isinstance(value, Mapping):
            raise InvalidGrantsFormatError(
                f"Query must be a mapping, a role or a list of roles, got {type(value).__name__}"
            )

        role = value.get("role")
        roles = tuple(role_names(role)) if role not in (None, "", [], ()) else ()
        action, possession = cls._parse_action(value.get("action"))
        explicit = Possession.parse(value.get("possession"))
        return cls(
            roles=roles,
            resource=value.get("resource") or None,
            action=action,
            possession=explicit or possession,
            context=value.get("context"),
            skip_conditions=bool(value.get("skip_conditions", False)),
        )

    @staticmethod
    def _parse_action(action: Any) -> tuple[str | None, Possession | None]:
        if action is None or action == "":
            return None, None
        if not isinstance(action, str):
            raise InvalidGrantsFormatError(f"Query action must be a string, got {action!r}")
        verb, possession = split_action(action)
        return verb or None, possession

    def require(self, *fields: str) -> "QueryInfo":
        """Raise :class:`MissingRequiredFieldError` unless every field is set."""
        for field in fields:
            attr = "roles" if field == "role" else field
            if not getattr(self, attr):
                raise MissingRequiredFieldError(field, self)
        return self

    def replace(self, **changes: Any) -> "QueryInfo":
        if "possession" in changes:
            changes["possession"] = Possession.parse(changes["possession"])
        return dataclasses.replace(self, **changes)

    @property
    def action_name(self) -> str | None:
        """``verb:possession`` form, or the bare verb when no possession is set."""
        if self.action is None:
            return None
        if self.possession is None:
            return self.action
        return f"{self.action}:{self.possession.value}"


__all__ = ["QueryInfo"]
