"""Value lookup inside a request context.

Two addressing styles are accepted:

* JSONPath, for strings rooted at ``$`` (``$.user.groups[0]``), compiled
  with :mod:`jsonpath_ng.ext` and cached;
* dotted keys (``user.groups.0``), walked segment by segment, where integer
  segments index into sequences. A leading ``context.`` segment is an alias
  for the context root.

A path that does not resolve yields :data:`MISSING`, never an exception.
"""
from __future__ import annotations

import functools
from typing import Any, Mapping, Sequence

from jsonpath_ng.ext import parse as _parse_jsonpath


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_ROOT_ALIAS = "context"


def is_jsonpath(path: Any) -> bool:
    return isinstance(path, str) and path.startswith("$")


@functools.lru_cache(maxsize=512)
def _compile(path: str) -> Any:
    return _parse_jsonpath(path)


def _walk(context: Any, segments: Sequence[str]) -> Any:
    node = context
    for segment in segments:
        if isinstance(node, Mapping):
            if segment not in node:
                return MISSING
            node = node[segment]
        elif isinstance(node, Sequence) and not isinstance(node, (str, bytes)):
            try:
                node = node[int(segment)]
            except (ValueError, IndexError):
                return MISSING
        else:
            return MISSING
    return node


def extract_by_path(context: Any, path: str) -> Any:
    """Return the value at *path* inside *context*, or :data:`MISSING`."""
    if context is None:
        return MISSING
    if is_jsonpath(path):
        if path == "$":
            return context
        matches = _compile(path).find(context)
        return matches[0].value if matches else MISSING
    segments = path.split(".")
    if segments[0] == _ROOT_ALIAS and len(segments) > 1:
        segments = segments[1:]
    return _walk(context, segments)


def resolve_value(context: Any, value: Any) -> Any:
    """Dereference *value* when it is a ``$``-rooted path; return it unchanged otherwise."""
    if is_jsonpath(value):
        return extract_by_path(context, value)
    return value


__all__ = ["MISSING", "extract_by_path", "is_jsonpath", "resolve_value"]
