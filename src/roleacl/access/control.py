"""AccessControl – the entry object tying store, evaluator and resolver together.

Example::

    ac = AccessControl({
        "user": {"grants": [
            {"resource": "profile", "action": "read:own", "attributes": ["*", "!password"]},
        ]},
    })
    result = await ac.permission({"role": "user", "resource": "profile", "action": "read:own"})
    result.filter({"name": "x", "password": "y"})   # {"name": "x"}

One instance is one access-control context; nothing is shared between
instances. Mutators return the instance so calls can be chained.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from roleacl.access.builders import GrantBuilder, QueryBuilder, RoleInput
from roleacl.access.conditions import ConditionEvaluator, Predicate
from roleacl.access.filtering import AttributeFilter
from roleacl.access.grants import Grant, GrantStore
from roleacl.access.query import PermissionResult, QueryInfo, QueryInput, QueryResolver
from roleacl.config import AccessControlSettings, EnvSettingsLoader
from roleacl.kernel.errors import AccessControlError
from roleacl.observability.logging import AuditLogger, AuditOutcome, JsonLoggerFactory

GrantsInput = Mapping[str, Any] | Iterable[Mapping[str, Any]]


class AccessControl:
    """RBAC + ABAC decision engine.

    Parameters
    ----------
    grants:
        Initial grants, object shape or flat list.
    evaluator:
        Condition evaluator; a fresh one with only built-in predicates by default.
    settings:
        :class:`AccessControlSettings`; defaults apply when omitted.
    audit:
        :class:`AuditLogger` receiving every :meth:`permission` decision.
        Created from ``settings`` when ``audit_decisions`` is on.

    With ``settings.configure_logging`` on, construction also configures the
    structlog JSON pipeline at ``settings.log_level``.
    """

    def __init__(
        self,
        grants: GrantsInput | None = None,
        *,
        evaluator: ConditionEvaluator | None = None,
        settings: AccessControlSettings | None = None,
        audit: AuditLogger | None = None,
    ) -> None:
        self._settings = settings or AccessControlSettings()
        if self._settings.configure_logging:
            JsonLoggerFactory.configure(self._settings.log_level)
        self._store = GrantStore()
        self._evaluator = evaluator or ConditionEvaluator()
        self._resolver = QueryResolver(self._store, self._evaluator)
        if audit is None and self._settings.audit_decisions:
            audit = AuditLogger(service=self._settings.audit_service)
        self._audit = audit
        if grants is not None:
            self.set_grants(grants)

    @classmethod
    def from_env(
        cls,
        grants: GrantsInput | None = None,
        environ: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> "AccessControl":
        """Build an instance configured from ``ROLEACL_*`` environment variables."""
        settings = EnvSettingsLoader(environ).load(AccessControlSettings)
        return cls(grants, settings=settings, **kwargs)

    @property
    def settings(self) -> AccessControlSettings:
        return self._settings

    @property
    def store(self) -> GrantStore:
        return self._store

    @property
    def evaluator(self) -> ConditionEvaluator:
        return self._evaluator

    # ------------------------------------------------------------------
    # Grant graph
    # ------------------------------------------------------------------

    def set_grants(self, grants: GrantsInput) -> "AccessControl":
        self._store.set_grants(grants)
        return self

    def add_grant(self, record: Mapping[str, Any]) -> "AccessControl":
        self._store.add_grant(record)
        return self

    def reset(self) -> "AccessControl":
        self._store.reset()
        return self

    def get_grants(self) -> dict[str, Any]:
        return self._store.get_grants()

    def get_roles(self) -> list[str]:
        return self._store.get_roles()

    def has_role(self, role: str) -> bool:
        return self._store.has_role(role)

    def get_inherited_roles(self, role: str) -> list[str]:
        return self._store.get_inherited_roles(role)

    def extend_role(
        self,
        roles: str | Iterable[str],
        extender_roles: str | Iterable[str],
        condition: Any = None,
    ) -> "AccessControl":
        self._store.extend_role(roles, extender_roles, condition)
        return self

    def remove_roles(self, roles: str | Iterable[str]) -> "AccessControl":
        self._store.remove_roles(roles)
        return self

    def register_condition(self, name: str, predicate: Predicate) -> "AccessControl":
        """Make *predicate* available to conditions as ``name`` or ``custom:name``."""
        self._evaluator.register(name, predicate)
        return self

    def unregister_condition(self, name: str) -> "AccessControl":
        self._evaluator.unregister(name)
        return self

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def grant(self, role: RoleInput = None) -> GrantBuilder:
        return GrantBuilder(self, role)

    def can(self, role: RoleInput = None) -> QueryBuilder:
        return QueryBuilder(self, role)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def permission(self, query: QueryInput) -> PermissionResult:
        info = QueryInfo.of(query)
        try:
            result = await self._resolver.permission(info)
        except Exception as exc:
            if self._audit is not None:
                self._audit.log_decision(
                    info.roles,
                    info.resource,
                    info.action_name,
                    AuditOutcome.ERROR,
                    context=info.context if isinstance(info.context, Mapping) else None,
                    error=type(exc).__name__,
                )
            raise
        if self._audit is not None:
            self._audit.log_decision(
                info.roles,
                info.resource,
                info.action_name,
                AuditOutcome.GRANTED if result.granted else AuditOutcome.DENIED,
                attributes=result.attributes,
                context=info.context if isinstance(info.context, Mapping) else None,
            )
        return result

    async def allowed_grants(self, query: QueryInput) -> list[Grant]:
        return await self._resolver.allowed_grants(query)

    async def allowed_actions(self, query: QueryInput) -> list[str]:
        return await self._resolver.allowed_actions(query)

    async def allowed_resources(self, query: QueryInput) -> list[str]:
        return await self._resolver.allowed_resources(query)

    async def allowed_attributes(self, query: QueryInput) -> tuple[str, ...]:
        return await self._resolver.allowed_attributes(query)

    async def allowing_roles(self, query: QueryInput) -> list[str]:
        return await self._resolver.allowing_roles(query)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def filter(data: Any, patterns: str | Iterable[str] | None) -> Any:
        """Project *data* onto *patterns* without a permission query."""
        return AttributeFilter().filter(data, patterns)

    @staticmethod
    def is_access_control_error(obj: Any) -> bool:
        return isinstance(obj, AccessControlError)


__all__ = ["AccessControl", "GrantsInput"]
