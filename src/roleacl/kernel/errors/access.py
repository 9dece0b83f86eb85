"""Access-control errors – malformed grants, role cycles and bad conditions."""

from __future__ import annotations

from typing import Any

from roleacl.kernel.errors.base import BaseError


class AccessControlError(BaseError):
    """Raised when the grant graph or a condition tree is used incorrectly."""

    default_code = "access_control_error"


class InvalidGrantsFormatError(AccessControlError):
    """Grant input is neither an object-shaped mapping nor a flat list,
    or one of its entries is malformed."""

    default_code = "invalid_grants_format"


class MissingRequiredFieldError(InvalidGrantsFormatError):
    """A grant record or query lacks ``role``, ``resource`` or ``action``."""

    default_code = "missing_required_field"

    def __init__(self, field: str, record: Any = None, **kwargs: Any) -> None:
        super().__init__(f"Missing required field '{field}'", **kwargs)
        self.field = field
        self.record = record


class CycleError(AccessControlError):
    """Extending a role would make it inherit from itself."""

    default_code = "role_cycle"

    def __init__(
        self,
        message: str,
        *,
        role: str | None = None,
        extender: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.role = role
        self.extender = extender


class RoleNotFoundError(CycleError):
    """The role a caller tried to inherit from is not defined."""

    default_code = "role_not_found"

    def __init__(self, role: str, **kwargs: Any) -> None:
        super().__init__(f"Role not found: {role!r}", extender=role, **kwargs)


class InvalidConditionArgsError(AccessControlError):
    """A condition node was given arguments of the wrong shape."""

    default_code = "invalid_condition_args"


class UnknownPredicateError(AccessControlError):
    """A condition references a predicate nobody registered."""

    default_code = "unknown_predicate"

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"Condition function not found: {name!r}", **kwargs)
        self.name = name


__all__ = [
    "AccessControlError",
    "CycleError",
    "InvalidConditionArgsError",
    "InvalidGrantsFormatError",
    "MissingRequiredFieldError",
    "RoleNotFoundError",
    "UnknownPredicateError",
]
