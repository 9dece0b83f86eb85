"""Kernel security – SecurityContext using contextvars."""

from __future__ import annotations

import contextlib
import contextvars
from typing import Iterator

from roleacl.kernel.errors import UnauthorizedError
from roleacl.kernel.security.principal import Principal

_VAR: contextvars.ContextVar[Principal | None] = contextvars.ContextVar(
    "_roleacl_principal", default=None
)


class SecurityContext:
    """Holds the principal whose roles guarded calls are checked against.

    Backed by :mod:`contextvars`, so concurrent asyncio tasks each see the
    principal they were started with.
    """

    @staticmethod
    def get_current() -> Principal | None:
        return _VAR.get()

    @staticmethod
    def require() -> Principal:
        """Return the current principal or raise ``UnauthorizedError``."""
        principal = _VAR.get()
        if principal is None:
            raise UnauthorizedError("No authenticated principal in context")
        return principal

    @staticmethod
    @contextlib.contextmanager
    def use(principal: Principal) -> Iterator[Principal]:
        """Bind *principal* for the duration of the ``with`` block."""
        token = _VAR.set(principal)
        try:
            yield principal
        finally:
            _VAR.reset(token)


__all__ = ["SecurityContext"]
