"""Attribute filtering – glob helpers, notation walk and AttributeFilter."""
from roleacl.access.filtering.attribute_filter import AttributeFilter
from roleacl.access.filtering.globs import (
    match_any,
    match_glob,
    normalize_patterns,
    sort_patterns,
    union_patterns,
)
from roleacl.access.filtering.notation import filter_by_notation

__all__ = [
    "AttributeFilter",
    "filter_by_notation",
    "match_any",
    "match_glob",
    "normalize_patterns",
    "sort_patterns",
    "union_patterns",
]
