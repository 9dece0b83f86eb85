"""Glob helpers shared by grant matching and attribute filtering.

Resource and action names are matched whole with :func:`fnmatch.fnmatchcase`.
Attribute notations are dotted paths matched segment by segment: ``*``
matches one segment, ``**`` any number of them, and a leading ``!`` negates.
"""
from __future__ import annotations

import fnmatch
from typing import Iterable, Sequence

NEGATION = "!"
SEPARATOR = "."
RECURSIVE = "**"
_WILDCARD_CHARS = frozenset("*?[")


def is_negated(pattern: str) -> bool:
    return pattern.startswith(NEGATION)


def strip_negation(pattern: str) -> str:
    return pattern[len(NEGATION):] if is_negated(pattern) else pattern


def has_wildcard(pattern: str) -> bool:
    return any(ch in _WILDCARD_CHARS for ch in strip_negation(pattern))


def match_glob(pattern: str, candidate: str) -> bool:
    """Whole-string glob match; a ``!`` prefix inverts the result."""
    if is_negated(pattern):
        return not fnmatch.fnmatchcase(candidate, strip_negation(pattern))
    return fnmatch.fnmatchcase(candidate, pattern)


def match_any(patterns: Iterable[str], candidate: str) -> bool:
    """Return whether *candidate* is selected by a list of patterns.

    A negated pattern that matches always excludes. Otherwise the candidate
    needs one matching positive pattern, unless the list holds only
    negations.
    """
    positives: list[str] = []
    for pattern in patterns:
        if is_negated(pattern):
            if fnmatch.fnmatchcase(candidate, strip_negation(pattern)):
                return False
        else:
            positives.append(pattern)
    return not positives or any(fnmatch.fnmatchcase(candidate, p) for p in positives)


def normalize_patterns(patterns: str | Iterable[str] | None) -> list[str]:
    """Accept a single pattern or an iterable; drop empty entries."""
    if patterns is None:
        return []
    if isinstance(patterns, str):
        patterns = [patterns]
    return [p.strip() for p in patterns if isinstance(p, str) and p.strip() and p.strip() != NEGATION]


def segments(pattern: str) -> tuple[str, ...]:
    return tuple(strip_negation(pattern).split(SEPARATOR))


def covers(pattern: Sequence[str], path: Sequence[str]) -> bool:
    """Return whether *pattern* matches *path* or one of its ancestors."""
    if not pattern:
        return True
    if not path:
        return False
    head = pattern[0]
    if head == RECURSIVE:
        return covers(pattern[1:], path) or covers(pattern, path[1:])
    return fnmatch.fnmatchcase(path[0], head) and covers(pattern[1:], path[1:])


def _specificity(item: tuple[int, str]) -> tuple[int, int, int, int]:
    index, pattern = item
    wildcard = has_wildcard(pattern)
    if is_negated(pattern):
        rank = 1
    elif wildcard:
        rank = 0
    else:
        rank = 2
    return rank, len(segments(pattern)), 0 if wildcard else 1, index


def sort_patterns(patterns: str | Iterable[str] | None) -> list[str]:
    """Order patterns from loose to verbose so later entries win.

    Positive wildcard globs come first, negations next, exact notations
    last; shallower before deeper; input order breaks ties.

    >>> sort_patterns(["car.model", "*", "!car.*"])
    ['*', '!car.*', 'car.model']
    """
    return [p for _, p in sorted(enumerate(normalize_patterns(patterns)), key=_specificity)]


def admits(patterns: Iterable[str], path: Sequence[str]) -> bool:
    """Return whether the sorted *patterns* let *path* through."""
    decision = False
    for pattern in sort_patterns(patterns):
        if covers(segments(pattern), path):
            decision = not is_negated(pattern)
    return decision


def union_patterns(left: Iterable[str], right: Iterable[str]) -> list[str]:
    """Union of two attribute glob lists.

    Positive globs are merged without duplicates. A negation survives only
    when the other list does not admit the notation it excludes, since that
    list grants it.
    """
    left = normalize_patterns(left)
    right = normalize_patterns(right)
    result: list[str] = []
    for pattern, other in [(p, right) for p in left] + [(p, left) for p in right]:
        if is_negated(pattern) and admits(other, segments(pattern)):
            continue
        if pattern not in result:
            result.append(pattern)
    return result


__all__ = [
    "admits",
    "covers",
    "has_wildcard",
    "is_negated",
    "match_any",
    "match_glob",
    "normalize_patterns",
    "segments",
    "sort_patterns",
    "strip_negation",
    "union_patterns",
]
