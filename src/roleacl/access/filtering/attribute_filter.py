from __future__ import annotations

from typing import Any, Iterable, Mapping

from roleacl.access.filtering.globs import sort_patterns
from roleacl.access.filtering.notation import filter_by_notation

__all__ = ["AttributeFilter"]


class AttributeFilter:
    """Deep-filters data objects down to the attributes a grant allows.

    Patterns are sorted by specificity before use, so their input order does
    not matter: ``["car.model", "*", "!car.*"]`` behaves like
    ``["*", "!car.*", "car.model"]``.

    Example::

        assets = {"notebook": "Mac", "car": {"brand": "Ford", "model": "Mustang"}}
        AttributeFilter().filter(assets, ["*", "!car.*", "car.model"])
        # {"notebook": "Mac", "car": {"model": "Mustang"}}
    """

    def filter(self, data: Any, patterns: str | Iterable[str] | None) -> Any:
        """Return a filtered copy of *data* (a mapping or a list of mappings).

        No patterns, or only empty strings, yield an empty result.
        """
        ordered = sort_patterns(patterns)
        if isinstance(data, Mapping):
            return filter_by_notation(data, ordered) if ordered else {}
        if isinstance(data, (list, tuple)):
            return [self.filter(item, ordered) for item in data]
        raise TypeError(
            f"AttributeFilter expects a mapping or a list of mappings, got {type(data).__name__}"
        )
