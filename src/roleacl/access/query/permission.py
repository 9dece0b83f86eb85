"""PermissionResult – the outcome of a permission query."""

from __future__ import annotations

import dataclasses
from typing import Any

from roleacl.access.filtering import AttributeFilter
from roleacl.access.query.info import QueryInfo

_FILTER = AttributeFilter()


@dataclasses.dataclass(frozen=True)
class PermissionResult:
    """Granted attribute globs for one query.

    Example::

        result = await resolver.permission({"role": "user", "resource": "profile", "action": "read:own"})
        if result:
            body = result.filter(profile)
    """

    query: QueryInfo
    attributes: tuple[str, ...] = ()

    @property
    def granted(self) -> bool:
        return len(self.attributes) > 0

    @property
    def roles(self) -> tuple[str, ...]:
        return self.query.roles

    @property
    def resource(self) -> str | None:
        return self.query.resource

    @property
    def action(self) -> str | None:
        return self.query.action_name

    def filter(self, data: Any) -> Any:
        """Project *data* (a mapping or a list of mappings) onto the granted attributes."""
        return _FILTER.filter(data, self.attributes)

    def __bool__(self) -> bool:
        return self.granted


__all__ = ["PermissionResult"]
