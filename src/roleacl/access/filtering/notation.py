"""Projection of nested data onto attribute notations.

:func:`filter_by_notation` applies patterns in the order given: for every
key, the last pattern covering its path (or an ancestor path) decides
whether it is kept. Containers are kept when they are admitted themselves
or when something below them is. Sequences are transparent: their mapping
items are filtered with the sequence's own path.
"""
from __future__ import annotations

import copy
from typing import Any, Mapping, Sequence

from roleacl.access.filtering.globs import covers, is_negated, segments

_Rule = tuple[tuple[str, ...], bool]


def _compile(patterns: Sequence[str]) -> list[_Rule]:
    return [(segments(p), not is_negated(p)) for p in patterns]


def _admitted(path: tuple[str, ...], rules: list[_Rule]) -> bool:
    decision = False
    for pattern, include in rules:
        if covers(pattern, path):
            decision = include
    return decision


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _filter_mapping(node: Mapping[Any, Any], path: tuple[str, ...], rules: list[_Rule]) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for key, value in node.items():
        child = path + (str(key),)
        admitted = _admitted(child, rules)
        if isinstance(value, Mapping):
            sub = _filter_mapping(value, child, rules)
            if admitted or sub:
                result[key] = sub
        elif _is_sequence(value):
            items = _filter_sequence(value, child, rules, admitted)
            if admitted or items:
                result[key] = items
        elif admitted:
            result[key] = copy.deepcopy(value)
    return result


def _filter_sequence(
    items: Sequence[Any], path: tuple[str, ...], rules: list[_Rule], admitted: bool
) -> list[Any]:
    out: list[Any] = []
    for item in items:
        if isinstance(item, Mapping):
            sub = _filter_mapping(item, path, rules)
            if admitted or sub:
                out.append(sub)
        elif admitted:
            out.append(copy.deepcopy(item))
    return out


def filter_by_notation(data: Mapping[Any, Any], patterns: Sequence[str]) -> dict[Any, Any]:
    """Return a filtered deep copy of the mapping *data*."""
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a mapping to filter, got {type(data).__name__}")
    return _filter_mapping(data, (), _compile(patterns))


__all__ = ["filter_by_notation"]
