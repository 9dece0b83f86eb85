"""Kernel security – PolicyDecision, PolicyContext, PolicyEngine."""
from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Protocol

from roleacl.kernel.security.principal import Principal


class PolicyDecision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclasses.dataclass(frozen=True)
class PolicyContext:
    """Context passed to the policy engine for evaluation.

    ``attributes`` is the runtime context conditions are evaluated against.
    """
    principal: Principal
    resource: str
    action: str
    possession: str | None = None
    attributes: dict[str, Any] = dataclasses.field(default_factory=dict)


class PolicyEngine(Protocol):
    """Port: evaluate access-control policies."""

    async def evaluate(self, context: PolicyContext) -> PolicyDecision: ...


__all__ = ["PolicyContext", "PolicyDecision", "PolicyEngine"]
