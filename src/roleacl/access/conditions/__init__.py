"""Condition trees – evaluator, built-in predicates and context paths."""
from roleacl.access.conditions.evaluator import ConditionEvaluator, check_condition, split_condition
from roleacl.access.conditions.paths import MISSING, extract_by_path, resolve_value
from roleacl.access.conditions.predicates import BUILTIN_PREDICATES, Predicate

__all__ = [
    "BUILTIN_PREDICATES",
    "ConditionEvaluator",
    "check_condition",
    "MISSING",
    "Predicate",
    "extract_by_path",
    "resolve_value",
    "split_condition",
]
