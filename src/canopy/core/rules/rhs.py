"""
Right-hand sides: what a rule emits.

An InwardRhs turns each matched fnode into a Fact that the engine merges
back into the knowledgebase. An OutwardRhs (``out(key)``) instead marks a
rule's results as a named, final output of the ruleset.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, Callable, FrozenSet, Iterable, Optional, Sequence, Tuple

from canopy.core.exceptions import InvalidFactError, RuleDefinitionError

from .fnode import Fnode
from .models import Fact

Call = Tuple[str, Tuple[Any, ...]]

FACT_KEYS = frozenset({"type", "score", "note", "element", "conserve_score"})
_CALLBACK_CALLS = frozenset({"note", "props", "element"})


def _identity(value: Any) -> Any:
    return value


class InwardRhs:
    """An RHS built from a chain of type/score/note/props/element/conserve_score calls."""

    def __init__(self, calls: Iterable[Call]) -> None:
        self._calls: Tuple[Call, ...] = tuple(calls)
        for name, args in self._calls:
            self._check_call(name, args)

    def __repr__(self) -> str:
        return ".".join(f"{name}({', '.join(map(repr, args))})" for name, args in self._calls)

    @staticmethod
    def _check_call(name: str, args: Sequence[Any]) -> None:
        if name == "type":
            if not isinstance(args[0], str):
                raise RuleDefinitionError(f"type() takes a type name, not {args[0]!r}.")
        elif name == "score":
            if not (callable(args[0]) or isinstance(args[0], (int, float))):
                raise RuleDefinitionError(f"score() takes a number or a callable, not {args[0]!r}.")
        elif name in _CALLBACK_CALLS:
            if not callable(args[0]):
                raise RuleDefinitionError(f"{name}() takes a callable, not {args[0]!r}.")
        elif name != "conserve_score":
            raise RuleDefinitionError(f"{name}() is not allowed on the right-hand side of a rule.")

    def as_rhs(self) -> "InwardRhs":
        return self

    def fact(self, fnode: Fnode) -> Fact:
        """Build the fact this RHS states about ``fnode``, applying calls in order."""
        fact = Fact()
        for name, args in self._calls:
            if name == "type":
                fact.type = args[0]
            elif name == "score":
                self._fold_score(fact, args[0](fnode) if callable(args[0]) else args[0])
            elif name == "note":
                fact.note = args[0](fnode)
            elif name == "element":
                fact.element = args[0](fnode)
            elif name == "conserve_score":
                fact.conserve_score = True
            elif name == "props":
                self._merge_props(fact, args[0](fnode))
        return fact

    @staticmethod
    def _fold_score(fact: Fact, value: float) -> None:
        fact.score = value if fact.score is None else fact.score * value

    def _merge_props(self, fact: Fact, props: Any) -> None:
        if not isinstance(props, Mapping):
            raise InvalidFactError(
                f"A props() callback must return a mapping, not {props!r}.",
                context={"rhs": self},
            )
        unknown = set(props) - FACT_KEYS
        if unknown:
            raise InvalidFactError(
                f"A props() callback returned unknown keys: {sorted(unknown)}.",
                context={"rhs": self, "keys": sorted(unknown)},
            )
        if "type" in props:
            fact.type = props["type"]
        if "score" in props:
            self._fold_score(fact, props["score"])
        if "note" in props:
            fact.note = props["note"]
        if "element" in props:
            fact.element = props["element"]
        if props.get("conserve_score"):
            fact.conserve_score = True

    def possible_types(self) -> FrozenSet[str]:
        """Types this RHS can emit; empty when a props() call leaves it open."""
        possible: FrozenSet[str] = frozenset()
        for name, args in self._calls:
            if name == "type":
                possible = frozenset({args[0]})
            elif name == "props":
                possible = frozenset()
        return possible

    def may_choose_type(self) -> bool:
        """Whether a props() callback, not a literal type() call, decides the output type."""
        chooses = False
        for name, _ in self._calls:
            if name == "type":
                chooses = False
            elif name == "props":
                chooses = True
        return chooses


class OutwardRhs:
    """Marks a rule as a final output, available from ``BoundRuleset.get(key)``."""

    def __init__(self, key: Hashable, through: Optional[Callable[[Any], Any]] = None) -> None:
        if not isinstance(key, Hashable):
            raise RuleDefinitionError(f"out() keys must be hashable, not {key!r}.")
        self.key = key
        self.through_fn: Callable[[Any], Any] = through or _identity

    def __repr__(self) -> str:
        return f"out({self.key!r})"

    def through(self, callback: Callable[[Any], Any]) -> "OutwardRhs":
        """Return an out() whose results are passed through ``callback``."""
        if not callable(callback):
            raise RuleDefinitionError(f"through() takes a callable, not {callback!r}.")
        return OutwardRhs(self.key, callback)

    def as_rhs(self) -> "OutwardRhs":
        return self


def out(key: Hashable) -> OutwardRhs:
    """Expose a rule's results under ``key``."""
    return OutwardRhs(key)


__all__ = ["InwardRhs", "OutwardRhs", "out", "FACT_KEYS"]
