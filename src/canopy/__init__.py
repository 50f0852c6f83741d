"""
Canopy - a lazy, memoized, forward-chaining rule engine for annotating trees.

Rules derive typed, scored, annotated facts about the elements of a
document. Results are computed on demand and cached per bound document.
"""

from canopy.core.documents import parse_document
from canopy.core.exceptions import CanopyError
from canopy.core.rules import (
    ByExpression,
    ByKey,
    ByNode,
    conserve_score,
    dom,
    element,
    note,
    out,
    props,
    rule,
    ruleset,
    score,
    type_,
)

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "CanopyError",
    "parse_document",
    "rule",
    "ruleset",
    "dom",
    "type_",
    "score",
    "note",
    "props",
    "element",
    "conserve_score",
    "out",
    "ByKey",
    "ByNode",
    "ByExpression",
]
