"""Grant graph value objects – Possession, ActionKey, Grant, Extension, Role."""
from __future__ import annotations

import dataclasses
import fnmatch
from enum import Enum
from typing import Any

from roleacl.access.filtering.globs import NEGATION, match_any
from roleacl.kernel.errors import InvalidGrantsFormatError

_POSSESSION_SEPARATOR = ":"


class Possession(str, Enum):
    """Whether an action is limited to the subject's own resources."""

    OWN = "own"
    ANY = "any"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Possession | str | None") -> "Possession | None":
        if value is None or isinstance(value, Possession):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidGrantsFormatError(
                f"Invalid possession {value!r}, expected 'own' or 'any'"
            ) from None


def split_action(action: str) -> tuple[str, Possession | None]:
    """Split ``"read:own"`` into ``("read", Possession.OWN)``; bare verbs keep ``None``."""
    verb, sep, suffix = action.strip().rpartition(_POSSESSION_SEPARATOR)
    if sep and suffix.lower() in (Possession.OWN.value, Possession.ANY.value):
        return verb, Possession(suffix.lower())
    return action.strip(), None


@dataclasses.dataclass(frozen=True)
class ActionKey:
    """One action pattern of a grant, e.g. ``read:own``, ``update``, ``*`` or ``!delete``.

    A bare verb stands for ``verb:any``.
    """

    verb: str
    possession: Possession = Possession.ANY
    negated: bool = False

    @classmethod
    def parse(cls, value: str) -> "ActionKey":
        if not isinstance(value, str) or not value.strip():
            raise InvalidGrantsFormatError(f"Invalid action {value!r}")
        text = value.strip()
        negated = text.startswith(NEGATION)
        verb, possession = split_action(text[len(NEGATION):] if negated else text)
        if not verb:
            raise InvalidGrantsFormatError(f"Invalid action {value!r}")
        return cls(verb=verb, possession=possession or Possession.ANY, negated=negated)

    def matches(self, verb: str | None, possession: Possession | None = None) -> bool:
        """Whether this key covers the queried verb / possession.

        ``any`` keys also cover ``own`` queries; a query without a
        possession is covered by both.
        """
        if verb is not None and not fnmatch.fnmatchcase(verb, self.verb):
            return False
        if possession is None or possession is Possession.OWN:
            return True
        return self.possession is Possession.ANY

    def __str__(self) -> str:
        prefix = NEGATION if self.negated else ""
        return f"{prefix}{self.verb}{_POSSESSION_SEPARATOR}{self.possession.value}"


@dataclasses.dataclass(frozen=True)
class Grant:
    """Allows an action on a resource, limited to some attributes,
    optionally gated by a condition."""

    resources: tuple[str, ...]
    actions: tuple[ActionKey, ...]
    attributes: tuple[str, ...] = ("*",)
    condition: Any = None

    def matches_resource(self, resource: str | None) -> bool:
        return resource is None or match_any(self.resources, resource)

    def matches_action(self, verb: str | None, possession: Possession | None = None) -> bool:
        positives = [a for a in self.actions if not a.negated]
        # negations only exclude a queried verb
        if verb is not None and any(a.matches(verb, possession) for a in self.actions if a.negated):
            return False
        return not positives or any(a.matches(verb, possession) for a in positives)

    @property
    def action_names(self) -> list[str]:
        return [str(a) for a in self.actions]

    def to_dict(self) -> dict[str, Any]:
        """Export in the record shape accepted by ``set_grants``."""
        record: dict[str, Any] = {
            "resource": self.resources[0] if len(self.resources) == 1 else list(self.resources),
            "action": self.action_names[0] if len(self.actions) == 1 else self.action_names,
            "attributes": list(self.attributes),
        }
        if self.condition is not None:
            record["condition"] = self.condition
        return record


@dataclasses.dataclass(frozen=True)
class Extension:
    """Inheritance edge; followed only while ``condition`` holds."""

    condition: Any = None


@dataclasses.dataclass
class Role:
    """A role node: its own grants plus the roles it inherits from."""

    name: str
    grants: list[Grant] = dataclasses.field(default_factory=list)
    extends: dict[str, Extension] = dataclasses.field(default_factory=dict)
    score: int = 1

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {"grants": [g.to_dict() for g in self.grants]}
        if self.extends:
            entry["$extend"] = {
                name: ({"condition": ext.condition} if ext.condition is not None else {})
                for name, ext in self.extends.items()
            }
        entry["score"] = self.score
        return entry


__all__ = ["ActionKey", "Extension", "Grant", "Possession", "Role", "split_action"]
