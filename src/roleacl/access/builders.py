"""Fluent builders over :class:`~roleacl.access.control.AccessControl`.

``GrantBuilder`` writes grants, ``QueryBuilder`` asks for permissions::

    ac.grant("user").read_own("profile", ["*", "!password"]).update_own("profile")
    ac.grant("admin").extend("user").create_any("video")

    result = await ac.can("user").with_context({"owner": True}).read_own("profile")
    result = await ac.can(["user", "editor"]).execute("publish").on("article")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from roleacl.access.grants import Possession, role_names, split_action
from roleacl.access.query import PermissionResult, QueryInfo
from roleacl.kernel.errors import MissingRequiredFieldError

if TYPE_CHECKING:
    from roleacl.access.control import AccessControl

RoleInput = str | Iterable[str] | Mapping[str, Any] | None


# ---------------------------------------------------------------------------
# GrantBuilder
# ---------------------------------------------------------------------------


class GrantBuilder:
    """Accumulates role / resource / attributes / condition and commits a
    grant each time an action method is called.

    A mapping passed as *role* pre-fills every field; when it also names an
    ``action`` the grant is committed straight away.
    """

    def __init__(self, ac: "AccessControl", role: RoleInput = None) -> None:
        self._ac = ac
        self._roles: Any = None
        self._resource: Any = None
        self._attributes: Any = None
        self._condition: Any = None
        self._action: str | None = None

        if isinstance(role, Mapping):
            self._roles = role.get("role")
            self._resource = role.get("resource")
            self._attributes = role.get("attributes")
            self._condition = role.get("condition")
            if role.get("action"):
                self._commit(role["action"], Possession.parse(role.get("possession")))
        else:
            self._roles = role

    # -- state --------------------------------------------------------------

    def role(self, roles: str | Iterable[str]) -> "GrantBuilder":
        self._roles = roles
        return self

    def resource(self, resource: str | Iterable[str]) -> "GrantBuilder":
        self._resource = resource
        return self

    def attributes(self, attributes: str | Iterable[str]) -> "GrantBuilder":
        self._attributes = attributes
        return self

    def when(self, condition: Any) -> "GrantBuilder":
        """Gate the grants committed from now on by *condition*."""
        self._condition = condition
        return self

    def extend(self, roles: str | Iterable[str], condition: Any = None) -> "GrantBuilder":
        """Let the current role(s) inherit from *roles*."""
        if not self._roles:
            raise MissingRequiredFieldError("role")
        self._ac.extend_role(self._roles, roles, condition)
        return self

    # -- commit -------------------------------------------------------------

    def _commit(
        self,
        action: str | Iterable[str],
        possession: Possession | None,
        resource: Any = None,
        attributes: Any = None,
    ) -> "GrantBuilder":
        record: dict[str, Any] = {
            "role": list(self._roles) if isinstance(self._roles, (set, frozenset)) else self._roles,
            "resource": resource if resource is not None else self._resource,
            "action": action,
        }
        if possession is not None:
            record["possession"] = possession.value
        chosen = attributes if attributes is not None else self._attributes
        if chosen is not None:
            record["attributes"] = chosen
        if self._condition is not None:
            record["condition"] = self._condition
        self._ac.add_grant(record)
        return self

    def execute(self, action: str) -> "GrantBuilder":
        """Select a custom action; commit it with :meth:`on`."""
        self._action = action
        return self

    def on(self, resource: str | Iterable[str] | None = None, attributes: Any = None) -> "GrantBuilder":
        if self._action is None:
            raise MissingRequiredFieldError("action")
        action, self._action = self._action, None
        return self._commit(action, None, resource, attributes)

    def create_own(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("create", Possession.OWN, resource, attributes)

    def create_any(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("create", Possession.ANY, resource, attributes)

    def read_own(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("read", Possession.OWN, resource, attributes)

    def read_any(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("read", Possession.ANY, resource, attributes)

    def update_own(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("update", Possession.OWN, resource, attributes)

    def update_any(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("update", Possession.ANY, resource, attributes)

    def delete_own(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("delete", Possession.OWN, resource, attributes)

    def delete_any(self, resource: Any = None, attributes: Any = None) -> "GrantBuilder":
        return self._commit("delete", Possession.ANY, resource, attributes)


# ---------------------------------------------------------------------------
# QueryBuilder
# ---------------------------------------------------------------------------


class QueryBuilder:
    """Builds a :class:`QueryInfo` step by step; action methods are coroutines
    resolving to a :class:`PermissionResult`."""

    def __init__(self, ac: "AccessControl", role: RoleInput = None) -> None:
        self._ac = ac
        self._query = QueryInfo.of(role)
        self._action: str | None = None

    @property
    def query(self) -> QueryInfo:
        return self._query

    def role(self, roles: str | Iterable[str]) -> "QueryBuilder":
        self._query = self._query.replace(roles=tuple(role_names(roles)))
        return self

    def resource(self, resource: str) -> "QueryBuilder":
        self._query = self._query.replace(resource=resource)
        return self

    def with_context(self, context: Any) -> "QueryBuilder":
        self._query = self._query.replace(context=context)
        return self

    def skip_conditions(self, skip: bool = True) -> "QueryBuilder":
        self._query = self._query.replace(skip_conditions=skip)
        return self

    async def _ask(self, action: str, possession: Possession | None, resource: str | None) -> PermissionResult:
        query = self._query.replace(
            action=action,
            possession=possession,
            resource=resource if resource is not None else self._query.resource,
        )
        return await self._ac.permission(query)

    def execute(self, action: str) -> "QueryBuilder":
        """Select a custom action; resolve it with :meth:`on`."""
        self._action = action
        return self

    async def on(self, resource: str | None = None) -> PermissionResult:
        if self._action is None:
            raise MissingRequiredFieldError("action")
        verb, possession = split_action(self._action)
        return await self._ask(verb, possession or self._query.possession, resource)

    async def create_own(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("create", Possession.OWN, resource)

    async def create_any(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("create", Possession.ANY, resource)

    async def read_own(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("read", Possession.OWN, resource)

    async def read_any(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("read", Possession.ANY, resource)

    async def update_own(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("update", Possession.OWN, resource)

    async def update_any(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("update", Possession.ANY, resource)

    async def delete_own(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("delete", Possession.OWN, resource)

    async def delete_any(self, resource: str | None = None) -> PermissionResult:
        return await self._ask("delete", Possession.ANY, resource)


__all__ = ["GrantBuilder", "QueryBuilder"]
