"""
roleacl – role and attribute based access control.

Import path convention::

    from roleacl.access import AccessControl, PermissionResult
    from roleacl.access.conditions import ConditionEvaluator
    from roleacl.kernel.errors import CycleError, InvalidGrantsFormatError
    from roleacl.config import AccessControlSettings
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
