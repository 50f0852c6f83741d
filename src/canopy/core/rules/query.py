"""
What ``BoundRuleset.get()`` can be asked for.

Callers may pass one of the tagged forms directly, or a shorthand that
``as_query`` recognizes: a string is an out() key, a document element is a
node, and anything with ``as_lhs`` is an ad-hoc expression.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Union

from canopy.core.documents import is_node
from canopy.core.exceptions import UnsupportedQueryError


@dataclass(frozen=True)
class ByKey:
    """The results of the out() rule registered under ``key``."""

    key: Hashable

    def __post_init__(self) -> None:
        try:
            hash(self.key)
        except TypeError:
            raise UnsupportedQueryError(self.key) from None


@dataclass(frozen=True, eq=False)
class ByNode:
    """The fully annotated fnode for one element. Runs every inward rule."""

    element: Any


@dataclass(frozen=True, eq=False)
class ByExpression:
    """The fnodes matched by an ad-hoc left-hand side."""

    lhs: Any


Query = Union[ByKey, ByNode, ByExpression]


def as_query(thing: Any) -> Query:
    if isinstance(thing, (ByKey, ByNode, ByExpression)):
        return thing
    if isinstance(thing, str):
        return ByKey(thing)
    if is_node(thing):
        return ByNode(thing)
    if callable(getattr(thing, "as_lhs", None)):
        return ByExpression(thing)
    raise UnsupportedQueryError(thing)


__all__ = ["ByKey", "ByNode", "ByExpression", "Query", "as_query"]
