"""Query layer – QueryInfo, QueryResolver and PermissionResult."""
from roleacl.access.query.info import QueryInfo
from roleacl.access.query.permission import PermissionResult
from roleacl.access.query.resolver import QueryInput, QueryResolver

__all__ = ["PermissionResult", "QueryInfo", "QueryInput", "QueryResolver"]
