"""In-memory grant graph.

:class:`GrantStore` owns the role map for one access-control context. It has
no internal locking: writers (``set_grants``, ``add_grant``, ``extend_role``,
``remove_roles``) must be serialized by the caller, while queries only read.

Example::

    store = GrantStore()
    store.set_grants({
        "user": {"grants": [{"resource": "video", "action": "read:any"}]},
        "admin": {"grants": [{"resource": "video", "action": "*"}], "$extend": {"user": {}}},
    })
    store.extend_role("editor", "user", {"EQUALS": {"shift": "day"}})
    await store.expand_roles(["editor"])   # ["editor", "user"] when accepted
"""

from __future__ import annotations

import collections
import copy
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Mapping

from roleacl.access.grants.models import Extension, Grant, Role
from roleacl.access.grants.normalize import (
    commit,
    copy_condition,
    inherits,
    role_names,
    roles_from_mapping,
    roles_from_records,
)
from roleacl.kernel.errors import CycleError, InvalidGrantsFormatError, RoleNotFoundError
from roleacl.observability.logging import get_logger

_log = get_logger(__name__)

ExtensionFilter = Callable[[Extension], Awaitable[bool]]


class GrantStore:
    """Role → grants map with cycle-checked inheritance."""

    def __init__(self, grants: Mapping[str, Any] | Iterable[Mapping[str, Any]] | None = None) -> None:
        self._roles: dict[str, Role] = {}
        if grants is not None:
            self.set_grants(grants)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_grants(self, grants: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> None:
        """Replace the whole graph with *grants* (object shape or flat list).

        The input is validated before anything is replaced, so a failure
        leaves the previous graph in place.
        """
        if isinstance(grants, Mapping):
            roles = roles_from_mapping(grants)
        elif isinstance(grants, (list, tuple)):
            roles = roles_from_records(grants)
        else:
            raise InvalidGrantsFormatError(
                f"Grants must be an object keyed by role or a list of records, "
                f"got {type(grants).__name__}"
            )
        self._roles = roles
        _log.debug("grants.set", roles=sorted(roles))

    def add_grant(self, record: Mapping[str, Any]) -> None:
        """Append one flat record; ``role`` may name several roles."""
        names = commit(self._roles, record)
        _log.debug("grants.add", roles=names, resource=record.get("resource"), action=record.get("action"))

    def extend_role(
        self,
        roles: str | Iterable[str],
        extender_roles: str | Iterable[str],
        condition: Any = None,
    ) -> None:
        """Make every role in *roles* inherit from every role in *extender_roles*.

        Raises :class:`RoleNotFoundError` for an undefined extender and
        :class:`CycleError` when a pair would close a loop. Every pair is
        checked before the graph changes. Missing *roles* are created.
        """
        targets = role_names(roles)
        extenders = role_names(extender_roles)
        condition = copy_condition(condition)

        for extender in extenders:
            if extender not in self._roles:
                raise RoleNotFoundError(extender)
        for role in targets:
            for extender in extenders:
                if role == extender:
                    raise CycleError(
                        f"Role {role!r} cannot extend itself", role=role, extender=extender
                    )
                if inherits(self._roles, extender, role):
                    raise CycleError(
                        f"Role {role!r} cannot extend {extender!r}: {extender!r} already inherits from {role!r}",
                        role=role,
                        extender=extender,
                    )

        for role in targets:
            node = self._roles.setdefault(role, Role(role))
            for extender in extenders:
                if extender not in node.extends:
                    node.score += self._roles[extender].score
                node.extends[extender] = Extension(condition)
            _log.debug("grants.extend", role=role, extenders=extenders, score=node.score)

    def remove_roles(self, roles: str | Iterable[str]) -> None:
        """Delete *roles* and unlink them from every role that extends them."""
        doomed = sorted(set(role_names(roles)))
        for node in self._roles.values():
            for name in doomed:
                if name in node.extends:
                    removed = self._roles.get(name)
                    if removed is not None:
                        node.score -= removed.score
                    del node.extends[name]
        for name in doomed:
            self._roles.pop(name, None)
        _log.debug("grants.remove", roles=doomed)

    def reset(self) -> None:
        self._roles = {}

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def roles(self) -> Mapping[str, Role]:
        """Read-only view of the role map."""
        return MappingProxyType(self._roles)

    def get_roles(self) -> list[str]:
        return list(self._roles)

    def has_role(self, name: str) -> bool:
        return name in self._roles

    def get_role(self, name: str) -> Role | None:
        return self._roles.get(name)

    def grants_of(self, name: str) -> list[Grant]:
        node = self._roles.get(name)
        return list(node.grants) if node is not None else []

    def get_grants(self) -> dict[str, Any]:
        """Export the graph in the object shape accepted by :meth:`set_grants`."""
        return copy.deepcopy({name: node.to_dict() for name, node in self._roles.items()})

    def get_inherited_roles(self, role: str) -> list[str]:
        """Every role *role* inherits from, conditions ignored."""
        found: list[str] = []
        queue = collections.deque([role])
        seen = {role}
        while queue:
            node = self._roles.get(queue.popleft())
            if node is None:
                continue
            for extender in node.extends:
                if extender not in seen:
                    seen.add(extender)
                    found.append(extender)
                    queue.append(extender)
        return found

    async def expand_roles(
        self,
        roles: str | Iterable[str],
        accept: ExtensionFilter | None = None,
    ) -> list[str]:
        """Breadth-first closure of *roles* over ``extends``.

        A conditioned extension is followed only when *accept* returns true
        for it; without *accept* every extension is followed. Each role is
        visited once, so stray cycles terminate. Unknown roles are kept in
        the result and simply carry no grants.
        """
        queue = collections.deque(role_names(roles))
        visited: list[str] = []
        while queue:
            name = queue.popleft()
            if name in visited:
                continue
            visited.append(name)
            node = self._roles.get(name)
            if node is None:
                continue
            for extender, extension in node.extends.items():
                if extender in visited:
                    continue
                if extension.condition is not None and accept is not None and not await accept(extension):
                    continue
                queue.append(extender)
        return visited

    def __contains__(self, name: object) -> bool:
        return name in self._roles

    def __len__(self) -> int:
        return len(self._roles)


__all__ = ["ExtensionFilter", "GrantStore"]
