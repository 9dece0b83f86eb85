"""Grant graph – models, input normalization and the in-memory store."""
from roleacl.access.grants.models import ActionKey, Extension, Grant, Possession, Role, split_action
from roleacl.access.grants.normalize import build_grant, role_names
from roleacl.access.grants.store import GrantStore

__all__ = [
    "ActionKey",
    "Extension",
    "Grant",
    "GrantStore",
    "Possession",
    "Role",
    "build_grant",
    "role_names",
    "split_action",
]
