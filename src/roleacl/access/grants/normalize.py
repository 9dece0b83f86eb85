"""Normalization of raw grant input into :class:`Role` nodes.

Two input shapes are accepted:

* object shape, keyed by role name::

      {"admin": {"grants": [{"resource": "video", "action": "*"}],
                 "$extend": {"user": {"condition": {...}}}}}

* flat list, one record per grant::

      [{"role": "user", "resource": "video", "action": "read:any"}]

Everything here builds fresh objects; callers swap the result in only once
the whole input has been validated.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Iterable, Mapping

from roleacl.access.conditions import check_condition
from roleacl.access.filtering.globs import normalize_patterns
from roleacl.access.grants.models import ActionKey, Extension, Grant, Possession, Role
from roleacl.kernel.errors import (
    CycleError,
    InvalidGrantsFormatError,
    MissingRequiredFieldError,
)

EXTEND_KEY = "$extend"
GRANTS_KEY = "grants"
DEFAULT_ATTRIBUTES: tuple[str, ...] = ("*",)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _required(record: Mapping[str, Any], field: str) -> Any:
    value = record.get(field)
    if value is None or value == "" or (isinstance(value, (list, tuple)) and not value):
        raise MissingRequiredFieldError(field, record)
    return value


def _strings(value: Any, field: str) -> list[str]:
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)):
        raise InvalidGrantsFormatError(
            f"'{field}' must be a string or a list of strings, got {type(value).__name__}"
        )
    result: list[str] = []
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise InvalidGrantsFormatError(f"Invalid {field} {item!r}")
        result.append(item.strip())
    return result


def role_names(value: str | Iterable[str]) -> list[str]:
    """Coerce a role or list of roles to a list of names, keeping order."""
    return _strings(value, "role")


def copy_condition(condition: Any) -> Any:
    """Validate *condition* and detach it from the caller's object."""
    check_condition(condition)
    return copy.deepcopy(condition)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def build_grant(record: Any) -> Grant:
    """Build one :class:`Grant` from a record; ``role`` is not looked at."""
    if not isinstance(record, Mapping):
        raise InvalidGrantsFormatError(
            f"Grant record must be a mapping, got {type(record).__name__}"
        )
    resources = tuple(_strings(_required(record, "resource"), "resource"))
    actions = tuple(ActionKey.parse(a) for a in _strings(_required(record, "action"), "action"))

    possession = Possession.parse(record.get("possession"))
    if possession is not None:
        actions = tuple(dataclasses.replace(a, possession=possession) for a in actions)

    attributes = record.get("attributes")
    if attributes is None:
        patterns: tuple[str, ...] = DEFAULT_ATTRIBUTES
    elif isinstance(attributes, (str, list, tuple)):
        patterns = tuple(normalize_patterns(attributes))
    else:
        raise InvalidGrantsFormatError(
            f"'attributes' must be a string or a list of strings, got {type(attributes).__name__}"
        )

    return Grant(
        resources=resources,
        actions=actions,
        attributes=patterns,
        condition=copy_condition(record.get("condition")),
    )


def commit(roles: dict[str, Role], record: Any) -> list[str]:
    """Append a flat record to *roles*, creating roles on demand.

    Returns the names the grant was attached to.
    """
    if not isinstance(record, Mapping):
        raise InvalidGrantsFormatError(
            f"Grant record must be a mapping, got {type(record).__name__}"
        )
    names = _strings(_required(record, "role"), "role")
    grant = build_grant(record)
    for name in names:
        roles.setdefault(name, Role(name)).grants.append(grant)
    return names


def roles_from_records(records: Iterable[Any]) -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for record in records:
        commit(roles, record)
    return roles


# ---------------------------------------------------------------------------
# Object shape
# ---------------------------------------------------------------------------


def _extension(role: str, extender: str, value: Any) -> Extension:
    # a bare number is a legacy score and carries no information
    if value is None or (isinstance(value, (int, float)) and not isinstance(value, bool)):
        return Extension()
    if isinstance(value, Mapping):
        return Extension(condition=copy_condition(value.get("condition")))
    raise InvalidGrantsFormatError(
        f"Invalid $extend entry {extender!r} on role {role!r}: {value!r}"
    )


def roles_from_mapping(data: Mapping[str, Any]) -> dict[str, Role]:
    roles: dict[str, Role] = {}
    for name, entry in data.items():
        if not isinstance(name, str) or not name.strip():
            raise InvalidGrantsFormatError(f"Invalid role name {name!r}")
        if not isinstance(entry, Mapping):
            raise InvalidGrantsFormatError(
                f"Role {name!r} must map to an object, got {type(entry).__name__}"
            )
        records = entry.get(GRANTS_KEY, [])
        if not isinstance(records, (list, tuple)):
            raise InvalidGrantsFormatError(f"'grants' of role {name!r} must be a list")
        role = Role(name, grants=[build_grant(r) for r in records])

        extends = entry.get(EXTEND_KEY)
        if extends is not None:
            if not isinstance(extends, Mapping):
                raise InvalidGrantsFormatError(f"'$extend' of role {name!r} must be a mapping")
            role.extends = {str(k): _extension(name, str(k), v) for k, v in extends.items()}
        roles[name] = role

    for role in roles.values():
        for extender in role.extends:
            if extender not in roles:
                raise InvalidGrantsFormatError(
                    f"Role {role.name!r} extends undefined role {extender!r}"
                )
    check_acyclic(roles)
    recompute_scores(roles)
    return roles


# ---------------------------------------------------------------------------
# Graph helpers
# ---------------------------------------------------------------------------


def inherits(roles: Mapping[str, Role], role: str, ancestor: str) -> bool:
    """Whether *role* reaches *ancestor* through ``extends``, ignoring conditions."""
    stack = [role]
    seen: set[str] = set()
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        node = roles.get(name)
        if node is None:
            continue
        if ancestor in node.extends:
            return True
        stack.extend(node.extends)
    return False


def check_acyclic(roles: Mapping[str, Role]) -> None:
    for name, node in roles.items():
        for extender in node.extends:
            if extender == name or inherits(roles, extender, name):
                raise CycleError(
                    f"Role {name!r} cannot extend {extender!r}: cyclic inheritance",
                    role=name,
                    extender=extender,
                )


def recompute_scores(roles: Mapping[str, Role]) -> None:
    """Set every score to one plus the scores of the roles it extends.

    The graph must be acyclic.
    """
    done: dict[str, int] = {}

    def score(name: str) -> int:
        if name not in done:
            node = roles[name]
            done[name] = 1 + sum(score(ext) for ext in node.extends if ext in roles)
        return done[name]

    for name, node in roles.items():
        node.score = score(name)


__all__ = [
    "DEFAULT_ATTRIBUTES",
    "EXTEND_KEY",
    "build_grant",
    "check_acyclic",
    "commit",
    "copy_condition",
    "inherits",
    "recompute_scores",
    "role_names",
    "roles_from_mapping",
    "roles_from_records",
]
