"""
Canopy rules engine.

Rules pair a left-hand side (what to read) with a right-hand side (what to
say about it). A Ruleset bound to a document evaluates them lazily:

    from canopy.core.rules import rule, ruleset, dom, type_, out

    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(2)),
        rule(type_("paragraph").max(), out("best")),
    )
    best = rules.against(doc).get("best")
"""
from __future__ import annotations

from .models import Fact, TypeRecord
from .fnode import Fnode
from .lhs import Lhs, DomLhs, TypeLhs, TypeMaxLhs
from .rhs import InwardRhs, OutwardRhs, out
from .side import Side, dom, type_, score, note, props, element, conserve_score
from .query import ByKey, ByNode, ByExpression, Query, as_query
from .ruleset import rule, ruleset, Rule, InwardRule, OutwardRule, Ruleset, BoundRuleset

__all__ = [
    # Models
    "Fact",
    "TypeRecord",
    "Fnode",
    # Sides
    "Lhs",
    "DomLhs",
    "TypeLhs",
    "TypeMaxLhs",
    "InwardRhs",
    "OutwardRhs",
    "Side",
    "dom",
    "type_",
    "score",
    "note",
    "props",
    "element",
    "conserve_score",
    "out",
    # Queries
    "ByKey",
    "ByNode",
    "ByExpression",
    "Query",
    "as_query",
    # Engine
    "rule",
    "ruleset",
    "Rule",
    "InwardRule",
    "OutwardRule",
    "Ruleset",
    "BoundRuleset",
]
