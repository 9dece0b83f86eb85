"""Asynchronous evaluation of condition trees.

A condition is one of:

* ``None``: no constraint, always true;
* a callable taking the context (sync or async);
* a mapping, either canonical ``{"Fn": "EQUALS", "args": {...}}`` or
  shorthand ``{"EQUALS": {...}}``.

``AND``, ``OR`` and ``NOT`` combine sub-conditions; every other name is a
leaf predicate looked up in :data:`BUILTIN_PREDICATES` and then in the
evaluator's own registry (``custom:<name>`` is accepted as an alias).

Example::

    evaluator = ConditionEvaluator()
    evaluator.register("is_owner", lambda args, ctx: ctx["user"] == ctx["owner"])
    await evaluator.evaluate(
        {"AND": [{"EQUALS": {"status": "active"}}, {"Fn": "custom:is_owner"}]},
        {"status": "active", "user": "u1", "owner": "u1"},
    )
"""
from __future__ import annotations

import inspect
from typing import Any, Mapping

from roleacl.access.conditions.predicates import BUILTIN_PREDICATES, Predicate
from roleacl.kernel.errors import InvalidConditionArgsError, UnknownPredicateError
from roleacl.observability.logging import get_logger

_log = get_logger(__name__)

AND = "AND"
OR = "OR"
NOT = "NOT"
COMBINATORS = frozenset({AND, OR, NOT})

_FN_KEY = "Fn"
_ARGS_KEY = "args"
_CUSTOM_PREFIX = "custom:"


async def _await_if_needed(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def split_condition(condition: Mapping[str, Any]) -> tuple[str, Any]:
    """Return ``(name, args)`` for a canonical or shorthand condition node."""
    if _FN_KEY in condition:
        name = condition[_FN_KEY]
        if not isinstance(name, str) or not name:
            raise InvalidConditionArgsError(f"Condition 'Fn' must be a non-empty string, got {name!r}")
        return name, condition.get(_ARGS_KEY)
    if len(condition) != 1:
        raise InvalidConditionArgsError(
            "Shorthand condition must hold exactly one {name: args} entry, "
            f"got keys {sorted(map(str, condition))}"
        )
    ((name, args),) = condition.items()
    return str(name), args


def _operands(name: str, args: Any) -> list[Any]:
    if isinstance(args, (list, tuple)):
        return list(args)
    if isinstance(args, Mapping):
        if _FN_KEY in args:
            return [args]
        return [{key: value} for key, value in args.items()]
    raise InvalidConditionArgsError(
        f"{name} condition expects a list or a mapping of conditions, got {type(args).__name__}"
    )


def check_condition(condition: Any) -> None:
    """Validate the shape of a condition tree without evaluating it.

    Predicate names are not resolved here; an unknown leaf is only reported
    when evaluation reaches it.
    """
    if condition is None or callable(condition):
        return
    if not isinstance(condition, Mapping):
        raise InvalidConditionArgsError(
            f"Condition must be a mapping or a callable, got {type(condition).__name__}"
        )
    name, args = split_condition(condition)
    if name not in COMBINATORS or args is None:
        return
    if name == NOT and callable(args):
        return
    for operand in _operands(name, args):
        check_condition(operand)


class ConditionEvaluator:
    """Evaluates condition trees against a request context.

    Custom predicates live on the instance, so two evaluators never share
    registrations.
    """

    def __init__(self, predicates: Mapping[str, Predicate] | None = None) -> None:
        self._custom: dict[str, Predicate] = {}
        for name, fn in (predicates or {}).items():
            self.register(name, fn)

    # -- registry ---------------------------------------------------------

    def register(self, name: str, predicate: Predicate) -> None:
        """Register *predicate* under *name* (``custom:`` prefix optional)."""
        name = name.removeprefix(_CUSTOM_PREFIX)
        if not name:
            raise ValueError("Predicate name must not be empty")
        if name in BUILTIN_PREDICATES or name in COMBINATORS:
            raise ValueError(f"{name!r} is a built-in condition and cannot be replaced")
        if not callable(predicate):
            raise TypeError(f"Predicate {name!r} must be callable")
        self._custom[name] = predicate

    def unregister(self, name: str) -> None:
        self._custom.pop(name.removeprefix(_CUSTOM_PREFIX), None)

    def registered(self) -> list[str]:
        """Names of the custom predicates, sorted."""
        return sorted(self._custom)

    def lookup(self, name: str) -> Predicate:
        if name in BUILTIN_PREDICATES:
            return BUILTIN_PREDICATES[name]
        predicate = self._custom.get(name.removeprefix(_CUSTOM_PREFIX))
        if predicate is None:
            raise UnknownPredicateError(name)
        return predicate

    # -- evaluation -------------------------------------------------------

    async def evaluate(self, condition: Any, context: Any = None) -> bool:
        """Return whether *condition* holds for *context*.

        Raises :class:`InvalidConditionArgsError` for malformed nodes and
        :class:`UnknownPredicateError` when a reached leaf is not registered.
        Exceptions raised by predicates propagate unchanged.
        """
        if condition is None:
            return True
        if callable(condition):
            return bool(await _await_if_needed(condition(context)))
        if not isinstance(condition, Mapping):
            raise InvalidConditionArgsError(
                f"Condition must be a mapping or a callable, got {type(condition).__name__}"
            )

        name, args = split_condition(condition)
        if name == AND:
            return await self._and(args, context)
        if name == OR:
            return await self._or(args, context)
        if name == NOT:
            return await self._not(args, context)

        predicate = self.lookup(name)
        result = bool(await _await_if_needed(predicate(args, context)))
        _log.debug("condition.leaf", predicate=name, result=result)
        return result

    async def _and(self, args: Any, context: Any) -> bool:
        if args is None:
            return True
        if context is None:
            return False
        result = True
        for operand in _operands(AND, args):
            # every operand runs, even after a false one
            result = await self.evaluate(operand, context) and result
        return result

    async def _or(self, args: Any, context: Any) -> bool:
        if args is None:
            return True
        if context is None:
            return False
        result = False
        for operand in _operands(OR, args):
            result = await self.evaluate(operand, context) or result
        return result

    async def _not(self, args: Any, context: Any) -> bool:
        if args is None:
            return True
        if context is None:
            return False
        if callable(args) or (isinstance(args, Mapping) and (_FN_KEY in args or len(args) == 1)):
            return not await self.evaluate(args, context)
        results = [await self.evaluate(operand, context) for operand in _operands(NOT, args)]
        return not any(results)


__all__ = ["AND", "COMBINATORS", "ConditionEvaluator", "NOT", "OR", "check_condition", "split_condition"]
