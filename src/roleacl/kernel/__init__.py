"""Kernel – framework-agnostic building blocks (errors, principals, policy port)."""

from roleacl.kernel.errors import (
    AccessControlError,
    ApplicationError,
    BaseError,
    CycleError,
    ForbiddenError,
    InvalidConditionArgsError,
    InvalidGrantsFormatError,
    MissingRequiredFieldError,
    RoleNotFoundError,
    UnauthorizedError,
    UnknownPredicateError,
)

__all__ = [
    "AccessControlError",
    "ApplicationError",
    "BaseError",
    "CycleError",
    "ForbiddenError",
    "InvalidConditionArgsError",
    "InvalidGrantsFormatError",
    "MissingRequiredFieldError",
    "RoleNotFoundError",
    "UnauthorizedError",
    "UnknownPredicateError",
]
