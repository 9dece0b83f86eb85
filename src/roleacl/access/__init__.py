"""Access control – grant graph, conditions, queries and attribute filtering."""
from roleacl.access.builders import GrantBuilder, QueryBuilder
from roleacl.access.conditions import ConditionEvaluator
from roleacl.access.control import AccessControl
from roleacl.access.filtering import AttributeFilter
from roleacl.access.grants import ActionKey, Grant, GrantStore, Possession, Role
from roleacl.access.guard import AccessControlPolicyEngine, require_permission
from roleacl.access.query import PermissionResult, QueryInfo, QueryResolver

__all__ = [
    "AccessControl",
    "AccessControlPolicyEngine",
    "ActionKey",
    "AttributeFilter",
    "ConditionEvaluator",
    "Grant",
    "GrantBuilder",
    "GrantStore",
    "PermissionResult",
    "Possession",
    "QueryBuilder",
    "QueryInfo",
    "QueryResolver",
    "Role",
    "require_permission",
]
