"""Built-in leaf predicates.

Every predicate is called as ``predicate(args, context)``. Apart from
``TRUE``/``FALSE``, the built-ins share one convention: no ``args`` means
"no constraint" (true) while a missing context means nothing can be checked
(false).

Most predicates take a mapping of ``{path: expected}``; every entry must
hold. ``expected`` may be a literal, a ``$``-rooted path into the context, or
a list of alternatives. ``{"path": p, "value": v}`` is read as ``{p: v}``.
"""
from __future__ import annotations

import functools
import operator
from typing import Any, Awaitable, Callable, Mapping, Union

from roleacl.access.conditions.paths import MISSING, extract_by_path, resolve_value
from roleacl.kernel.errors import InvalidConditionArgsError

Predicate = Callable[[Any, Any], Union[bool, Awaitable[bool]]]

_COLLECTIONS = (list, tuple, set, frozenset)


def _guarded(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    @functools.wraps(fn)
    def wrapper(args: Any, context: Any) -> bool:
        if args is None:
            return True
        if context is None:
            return False
        return fn(args, context)

    return wrapper


def _pairs(name: str, args: Any) -> list[tuple[str, Any]]:
    if not isinstance(args, Mapping):
        raise InvalidConditionArgsError(
            f"{name} expects a mapping of path -> value, got {type(args).__name__}"
        )
    if set(args) == {"path", "value"}:
        return [(args["path"], args["value"])]
    return list(args.items())


def _alternatives(context: Any, raw: Any) -> list[Any]:
    if isinstance(raw, _COLLECTIONS):
        return [resolve_value(context, item) for item in raw]
    value = resolve_value(context, raw)
    if isinstance(value, _COLLECTIONS):
        return list(value)
    return [value]


def _true(args: Any, context: Any) -> bool:  # noqa: ARG001
    return True


def _false(args: Any, context: Any) -> bool:  # noqa: ARG001
    return False


@_guarded
def _equals(args: Any, context: Any) -> bool:
    for path, raw in _pairs("EQUALS", args):
        actual = extract_by_path(context, path)
        if actual is MISSING or actual not in _alternatives(context, raw):
            return False
    return True


@_guarded
def _not_equals(args: Any, context: Any) -> bool:
    for path, raw in _pairs("NOT_EQUALS", args):
        actual = extract_by_path(context, path)
        if actual is MISSING or actual in _alternatives(context, raw):
            return False
    return True


@_guarded
def _starts_with(args: Any, context: Any) -> bool:
    for path, raw in _pairs("STARTS_WITH", args):
        actual = extract_by_path(context, path)
        if not isinstance(actual, str):
            return False
        prefixes = [p for p in _alternatives(context, raw) if isinstance(p, str)]
        if not any(actual.startswith(p) for p in prefixes):
            return False
    return True


@_guarded
def _list_contains(args: Any, context: Any) -> bool:
    for path, raw in _pairs("LIST_CONTAINS", args):
        actual = extract_by_path(context, path)
        if not isinstance(actual, _COLLECTIONS):
            return False
        if not any(item in actual for item in _alternatives(context, raw)):
            return False
    return True


@_guarded
def _in(args: Any, context: Any) -> bool:
    for path, raw in _pairs("IN", args):
        actual = extract_by_path(context, path)
        if actual is MISSING:
            return False
        allowed = _alternatives(context, raw)
        members = actual if isinstance(actual, _COLLECTIONS) else [actual]
        if not all(m in allowed for m in members):
            return False
    return True


def _comparison(name: str, op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    @_guarded
    def compare(args: Any, context: Any) -> bool:
        for path, raw in _pairs(name, args):
            actual = extract_by_path(context, path)
            bound = resolve_value(context, raw)
            if actual is MISSING or actual is None or bound is MISSING or bound is None:
                return False
            try:
                if not op(actual, bound):
                    return False
            except TypeError:
                return False
        return True

    compare.__name__ = f"_{name.lower()}"
    return compare


@_guarded
def _exists(args: Any, context: Any) -> bool:
    if isinstance(args, str):
        expectations = {args: True}
    elif isinstance(args, Mapping):
        expectations = {path: bool(flag) for path, flag in args.items()}
    elif isinstance(args, _COLLECTIONS):
        expectations = {path: True for path in args}
    else:
        raise InvalidConditionArgsError(
            f"EXISTS expects a path, a list of paths or a mapping, got {type(args).__name__}"
        )
    return all(
        (extract_by_path(context, path) is not MISSING) is present
        for path, present in expectations.items()
    )


BUILTIN_PREDICATES: dict[str, Predicate] = {
    "TRUE": _true,
    "FALSE": _false,
    "EQUALS": _equals,
    "NOT_EQUALS": _not_equals,
    "STARTS_WITH": _starts_with,
    "LIST_CONTAINS": _list_contains,
    "IN": _in,
    "GREATER_THAN": _comparison("GREATER_THAN", operator.gt),
    "GREATER_OR_EQUAL": _comparison("GREATER_OR_EQUAL", operator.ge),
    "LESS_THAN": _comparison("LESS_THAN", operator.lt),
    "LESS_OR_EQUAL": _comparison("LESS_OR_EQUAL", operator.le),
    "EXISTS": _exists,
}


__all__ = ["BUILTIN_PREDICATES", "Predicate"]
