"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── AccessControlError          (access.py)
    │   ├── InvalidGrantsFormatError
    │   │   └── MissingRequiredFieldError
    │   ├── CycleError
    │   │   └── RoleNotFoundError
    │   ├── InvalidConditionArgsError
    │   └── UnknownPredicateError
    └── ApplicationError            (application.py)
        ├── UnauthorizedError
        └── ForbiddenError
"""

from roleacl.kernel.errors.access import (
    AccessControlError,
    CycleError,
    InvalidConditionArgsError,
    InvalidGrantsFormatError,
    MissingRequiredFieldError,
    RoleNotFoundError,
    UnknownPredicateError,
)
from roleacl.kernel.errors.application import (
    ApplicationError,
    ForbiddenError,
    UnauthorizedError,
)
from roleacl.kernel.errors.base import BaseError

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
