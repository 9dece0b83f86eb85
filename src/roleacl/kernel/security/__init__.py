"""Kernel security – Principal, policy port, SecurityContext."""
from roleacl.kernel.security.principal import Principal, Role
from roleacl.kernel.security.policy import PolicyContext, PolicyDecision, PolicyEngine
from roleacl.kernel.security.security_context import SecurityContext

__all__ = [
    "PolicyContext",
    "PolicyDecision",
    "PolicyEngine",
    "Principal",
    "Role",
    "SecurityContext",
]
