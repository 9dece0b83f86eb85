"""Guard – plugs :class:`AccessControl` into the kernel security ports.

* :class:`AccessControlPolicyEngine`: :class:`~roleacl.kernel.security.PolicyEngine`
  backed by permission queries.
* :func:`require_permission`: decorator for async handlers checking the
  principal bound in :class:`~roleacl.kernel.security.SecurityContext`.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from roleacl.access.control import AccessControl
from roleacl.access.query import PermissionResult
from roleacl.kernel.errors import ForbiddenError
from roleacl.kernel.security import PolicyContext, PolicyDecision, Principal, SecurityContext
from roleacl.observability.logging import get_logger

_log = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])
ContextFactory = Callable[..., Mapping[str, Any]]


def _principal_context(principal: Principal) -> dict[str, Any]:
    return {**principal.claims, "subject": principal.subject}


# ---------------------------------------------------------------------------
# PolicyEngine adapter
# ---------------------------------------------------------------------------


class AccessControlPolicyEngine:
    """Answers :class:`PolicyContext` requests with ``permission`` queries.

    The principal's role names become the query roles and
    ``context.attributes`` the condition context. A principal without roles
    is denied.
    """

    def __init__(self, ac: AccessControl) -> None:
        self._ac = ac

    async def check(self, context: PolicyContext) -> PermissionResult | None:
        roles = context.principal.role_names
        if not roles:
            return None
        return await self._ac.permission(
            {
                "role": roles,
                "resource": context.resource,
                "action": context.action,
                "possession": context.possession,
                "context": context.attributes or None,
            }
        )

    async def evaluate(self, context: PolicyContext) -> PolicyDecision:
        result = await self.check(context)
        decision = PolicyDecision.ALLOW if result else PolicyDecision.DENY
        _log.debug(
            "policy.evaluated",
            subject=context.principal.subject,
            resource=context.resource,
            action=context.action,
            decision=decision.value,
        )
        return decision


# ---------------------------------------------------------------------------
# @require_permission decorator
# ---------------------------------------------------------------------------


def require_permission(
    ac: AccessControl,
    resource: str,
    action: str,
    possession: str | None = None,
    *,
    context: ContextFactory | None = None,
) -> Callable[[F], F]:
    """Decorator refusing the call unless the current principal is granted
    *action* on *resource*.

    Raises :class:`UnauthorizedError` when no principal is bound and
    :class:`ForbiddenError` when the query is denied. The condition context
    is built by *context* from the call arguments, or from the principal's
    claims plus ``subject`` when omitted.

    Example::

        @require_permission(ac, "article", "update", "own",
                            context=lambda article_id, **_: {"article_id": article_id})
        async def update_article(article_id: str, body: dict) -> None:
            ...
    """
    engine = AccessControlPolicyEngine(ac)

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            principal = SecurityContext.require()
            attributes = dict(context(*args, **kwargs)) if context is not None else _principal_context(principal)
            policy_context = PolicyContext(
                principal=principal,
                resource=resource,
                action=action,
                possession=possession,
                attributes=attributes,
            )
            if await engine.evaluate(policy_context) is not PolicyDecision.ALLOW:
                permission = action if possession is None else f"{action}:{possession}"
                raise ForbiddenError(
                    f"principal {principal.subject!r} may not {permission} {resource!r}",
                    permission=f"{resource}:{permission}",
                )
            return await fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["AccessControlPolicyEngine", "ContextFactory", "require_permission"]
