"""
experiments_sdk.tier3_platform.predicates
───────────────────────────────────────────
Predicate primitives evaluated against an EvaluationContext of lazily
resolved variables. Rule engines compose these to decide whether a rule
applies; the experiments extension contributes both variables (one per test)
and predicates (group membership, audience gating).

Usage:
    ctx = EvaluationContext({"hero": lambda: resolve_hero(), "devs": is_dev})
    await And(Contains("hero", "b"), Variable("devs")).test(ctx)
"""
from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

VariableMap = Mapping[str, Callable[[], Any]]


class EvaluationContext:
    """Resolves variables by name. Unknown variables resolve to None."""

    def __init__(self, variables: VariableMap | None = None) -> None:
        self._variables = dict(variables or {})

    def has(self, name: str) -> bool:
        return name in self._variables

    async def get(self, name: str) -> Any:
        getter = self._variables.get(name)
        if getter is None:
            return None
        value = getter()
        if inspect.isawaitable(value):
            value = await value
        return value


@runtime_checkable
class Predicate(Protocol):
    async def test(self, context: EvaluationContext) -> bool: ...


@dataclass(frozen=True)
class Variable:
    """True when the named variable resolves to a truthy value."""
    name: str

    async def test(self, context: EvaluationContext) -> bool:
        return bool(await context.get(self.name))


@dataclass(frozen=True)
class Contains:
    """True when the named variable is a collection holding *value*."""
    variable: str
    value: Any

    async def test(self, context: EvaluationContext) -> bool:
        resolved = await context.get(self.variable)
        if resolved is None:
            return False
        try:
            return self.value in resolved
        except TypeError:
            return False


class And:
    """Short-circuiting conjunction of predicates."""

    def __init__(self, *predicates: Predicate) -> None:
        self.predicates = predicates

    async def test(self, context: EvaluationContext) -> bool:
        for predicate in self.predicates:
            if not await predicate.test(context):
                return False
        return True

    def __repr__(self) -> str:
        return f"And({', '.join(repr(p) for p in self.predicates)})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, And) and self.predicates == other.predicates


__all__ = [
    "VariableMap",
    "EvaluationContext",
    "Predicate",
    "Variable",
    "Contains",
    "And",
]
