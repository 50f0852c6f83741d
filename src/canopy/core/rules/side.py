"""
Chainable shorthand for writing rules.

    rule(dom("p"), type_("paragraph").score(2))
    rule(type_("paragraph").max(), out("best"))

A Side only records the calls made on it. Whether it is an LHS or an RHS is
decided when a rule is constructed, by ``as_lhs()`` or ``as_rhs()``.
"""
from __future__ import annotations

from typing import Any, Callable, Tuple, Union

from canopy.core.exceptions import RuleDefinitionError

from .lhs import DomLhs, Lhs, TypeLhs, TypeMaxLhs
from .rhs import Call, InwardRhs

Number = Union[int, float]


class Side:
    """An immutable chain of calls such as ``type_('a').score(2)``."""

    def __init__(self, *calls: Call) -> None:
        self._calls: Tuple[Call, ...] = calls

    def __repr__(self) -> str:
        parts = [f"{name}({', '.join(map(repr, args))})" for name, args in self._calls]
        if parts and parts[0].startswith("type("):
            parts[0] = "type_" + parts[0][len("type"):]
        return ".".join(parts)

    def _then(self, name: str, *args: Any) -> "Side":
        return Side(*self._calls, (name, args))

    def type(self, type_name: str) -> "Side":
        if not isinstance(type_name, str):
            raise RuleDefinitionError(f"type_() takes a type name, not {type_name!r}.")
        return self._then("type", type_name)

    def max(self) -> "Side":
        return self._then("max")

    def score(self, score_or_callback: Union[Number, Callable[[Any], Number]]) -> "Side":
        return self._then("score", score_or_callback)

    def note(self, callback: Callable[[Any], Any]) -> "Side":
        return self._then("note", callback)

    def props(self, callback: Callable[[Any], Any]) -> "Side":
        return self._then("props", callback)

    def element(self, callback: Callable[[Any], Any]) -> "Side":
        return self._then("element", callback)

    def conserve_score(self) -> "Side":
        return self._then("conserve_score")

    def as_lhs(self) -> Lhs:
        if not self._calls:
            raise RuleDefinitionError("An empty expression can't be a left-hand side.")
        (first, args), rest = self._calls[0], self._calls[1:]
        lhs: Lhs
        if first == "dom":
            lhs = DomLhs(args[0])
        elif first == "type":
            lhs = TypeLhs(args[0])
        else:
            raise RuleDefinitionError(
                f"A left-hand side must start with dom() or type_(), not {first}(): {self!r}"
            )
        for name, _ in rest:
            if name == "max" and type(lhs) is TypeLhs:
                lhs = TypeMaxLhs(lhs.type)
            else:
                raise RuleDefinitionError(
                    f"{name}() is not allowed there on the left-hand side of a rule: {self!r}"
                )
        return lhs

    def as_rhs(self) -> InwardRhs:
        for name, _ in self._calls:
            if name in ("dom", "max"):
                raise RuleDefinitionError(
                    f"{name}() is not allowed on the right-hand side of a rule: {self!r}"
                )
        return InwardRhs(self._calls)


def dom(selector: str) -> Side:
    """Select document elements; see ``canopy.core.documents.select``."""
    if not isinstance(selector, str):
        raise RuleDefinitionError(f"dom() takes a selector string, not {selector!r}.")
    return Side(("dom", (selector,)))


def type_(type_name: str) -> Side:
    return Side().type(type_name)


def score(score_or_callback: Union[Number, Callable[[Any], Number]]) -> Side:
    return Side().score(score_or_callback)


def note(callback: Callable[[Any], Any]) -> Side:
    return Side().note(callback)


def props(callback: Callable[[Any], Any]) -> Side:
    return Side().props(callback)


def element(callback: Callable[[Any], Any]) -> Side:
    return Side().element(callback)


def conserve_score() -> Side:
    return Side().conserve_score()


__all__ = ["Side", "dom", "type_", "score", "note", "props", "element", "conserve_score"]
