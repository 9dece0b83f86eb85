"""QueryResolver – walks the grant graph for a query.

Every method expands the queried roles through ``extends``, keeps the grants
whose resource and action patterns match, gates them by their conditions and
unions what is left. The ``allowed_*`` family never evaluates conditions and
reports the static surface; :meth:`permission` evaluates them regardless of
the context.
"""

from __future__ import annotations

from typing import Any, Mapping

from roleacl.access.conditions import ConditionEvaluator
from roleacl.access.filtering.globs import union_patterns
from roleacl.access.grants import Extension, Grant, GrantStore
from roleacl.access.query.info import QueryInfo
from roleacl.access.query.permission import PermissionResult
from roleacl.observability.logging import get_logger

_log = get_logger(__name__)

QueryInput = QueryInfo | Mapping[str, Any]


class QueryResolver:
    """Answers queries against one :class:`GrantStore`."""

    def __init__(self, store: GrantStore, evaluator: ConditionEvaluator | None = None) -> None:
        self._store = store
        self._evaluator = evaluator or ConditionEvaluator()

    @property
    def evaluator(self) -> ConditionEvaluator:
        return self._evaluator

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    async def _expand(self, query: QueryInfo, skip: bool) -> list[str]:
        if skip:
            return await self._store.expand_roles(query.roles)

        async def accept(extension: Extension) -> bool:
            return await self._evaluator.evaluate(extension.condition, query.context)

        return await self._store.expand_roles(query.roles, accept)

    async def _grants(self, query: QueryInfo, skip: bool) -> list[Grant]:
        if not query.roles:
            return []
        accepted: list[Grant] = []
        for role in await self._expand(query, skip):
            for grant in self._store.grants_of(role):
                if not grant.matches_resource(query.resource):
                    continue
                if not grant.matches_action(query.action, query.possession):
                    continue
                if grant.condition is not None and not skip:
                    if not await self._evaluator.evaluate(grant.condition, query.context):
                        continue
                if grant not in accepted:
                    accepted.append(grant)
        return accepted

    @staticmethod
    def _skips(query: QueryInfo) -> bool:
        return query.skip_conditions or query.context is None

    @staticmethod
    def _union(grants: list[Grant]) -> tuple[str, ...]:
        attributes: list[str] = []
        for grant in grants:
            attributes = union_patterns(attributes, grant.attributes)
        return tuple(attributes)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def allowed_grants(self, query: QueryInput) -> list[Grant]:
        """Grants reachable from the queried roles that match resource and action.

        Conditions on grants and extensions are ignored, context or not.
        """
        info = QueryInfo.of(query).require("role")
        return await self._grants(info, skip=True)

    async def allowed_actions(self, query: QueryInput) -> list[str]:
        """Actions (``verb:possession``) granted on ``query.resource``."""
        actions: list[str] = []
        for grant in await self.allowed_grants(query):
            for key in grant.actions:
                name = str(key)
                if not key.negated and name not in actions:
                    actions.append(name)
        return actions

    async def allowed_resources(self, query: QueryInput) -> list[str]:
        """Resource patterns the queried roles hold any grant on."""
        resources: list[str] = []
        for grant in await self.allowed_grants(query):
            for resource in grant.resources:
                if resource not in resources:
                    resources.append(resource)
        return resources

    async def allowed_attributes(self, query: QueryInput) -> tuple[str, ...]:
        """Union of attribute globs of the matching grants."""
        return self._union(await self.allowed_grants(query))

    async def attributes_of(self, query: QueryInput) -> tuple[str, ...]:
        """Union of attribute globs of the grants whose conditions accept the context."""
        info = QueryInfo.of(query).require("role")
        return self._union(await self._grants(info, info.skip_conditions))

    async def permission(self, query: QueryInput) -> PermissionResult:
        """Resolve a fully specified query into a :class:`PermissionResult`.

        Raises :class:`MissingRequiredFieldError` when role, resource or
        action is missing.
        """
        info = QueryInfo.of(query).require("role", "resource", "action")
        attributes = await self.attributes_of(info)
        result = PermissionResult(info, attributes)
        _log.debug(
            "permission.resolved",
            roles=list(info.roles),
            resource=info.resource,
            action=info.action_name,
            granted=result.granted,
            attributes=list(attributes),
        )
        return result

    async def allowing_roles(self, query: QueryInput) -> list[str]:
        """Roles, among those queried, that grant the query themselves or by inheritance.

        With no roles in the query every stored role is a candidate.
        """
        info = QueryInfo.of(query)
        candidates = info.roles or tuple(self._store.get_roles())
        skip = self._skips(info)
        allowing: list[str] = []
        for role in candidates:
            single = info.replace(roles=(role,))
            if self._union(await self._grants(single, skip)):
                allowing.append(role)
        return allowing


__all__ = ["QueryInput", "QueryResolver"]
