"""
Left-hand sides: what a rule reads.

Each LHS answers four questions for the engine: which fnodes match
(``fnodes``), whether a fact is acceptable for its kind (``check_fact``),
which single type every match is sure to carry (``guaranteed_type``), and
which types matches may carry (``possible_types``).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, FrozenSet, List, Optional

from canopy.core.documents import select
from canopy.core.exceptions import InvalidFactError
from canopy.core.utils.profiling import span

from .fnode import Fnode
from .models import Fact

if TYPE_CHECKING:
    from .ruleset import BoundRuleset

logger = logging.getLogger(__name__)


class Lhs:
    """Base LHS. Subclasses implement ``fnodes``."""

    def as_lhs(self) -> "Lhs":
        return self

    def fnodes(self, ruleset: "BoundRuleset") -> List[Fnode]:
        raise NotImplementedError

    def check_fact(self, fact: Fact) -> None:
        return None

    def guaranteed_type(self) -> Optional[str]:
        return None

    def possible_types(self) -> FrozenSet[str]:
        return frozenset()


class DomLhs(Lhs):
    """Matches document elements by selector."""

    def __init__(self, selector: str) -> None:
        self.selector = selector

    def __repr__(self) -> str:
        return f"dom({self.selector!r})"

    def fnodes(self, ruleset: "BoundRuleset") -> List[Fnode]:
        return [ruleset.fnode_for_element(el) for el in select(ruleset.doc, self.selector)]

    def check_fact(self, fact: Fact) -> None:
        if fact.is_empty():
            raise InvalidFactError(
                f"The right-hand side of a {self!r} rule specified nothing: no type, score, "
                "note, or score conservation. Its output could never be used by later rules.",
                context={"lhs": self, "fact": fact},
            )


class TypeLhs(Lhs):
    """Matches every fnode that some rule has given a type."""

    def __init__(self, type_name: str) -> None:
        self.type = type_name

    def __repr__(self) -> str:
        return f"type_({self.type!r})"

    def guaranteed_type(self) -> Optional[str]:
        return self.type

    def possible_types(self) -> FrozenSet[str]:
        return frozenset({self.type})

    def fnodes(self, ruleset: "BoundRuleset") -> List[Fnode]:
        cached = ruleset.type_cache.get(self.type)
        if cached is None:
            with span("rules.lhs.type", type=self.type):
                cached = ruleset.type_cache[self.type] = tuple(self._fnodes_from_rules(ruleset))
            logger.debug("Found %d fnode(s) of type %r", len(cached), self.type)
        return list(cached)

    def _fnodes_from_rules(self, ruleset: "BoundRuleset") -> List[Fnode]:
        # Dict keys keep first-seen order; Fnode hashes by identity.
        found = {}
        for rule in ruleset.rules_which_might_add(self.type):
            for fnode in rule.results(ruleset):
                if fnode.has_type(self.type):
                    found[fnode] = None
        return list(found)


class TypeMaxLhs(TypeLhs):
    """The highest-scoring fnode(s) of a type; all of them on a tie."""

    def __repr__(self) -> str:
        return f"type_({self.type!r}).max()"

    def fnodes(self, ruleset: "BoundRuleset") -> List[Fnode]:
        cached = ruleset.max_cache.get(self.type)
        if cached is None:
            with span("rules.lhs.max", type=self.type):
                candidates = super().fnodes(ruleset)
                # Finish scoring first: rules that read and write this type
                # don't "add" it, so TypeLhs never ran them. Rules reading this
                # max, or already running, see it only after it is settled.
                for rule in ruleset.rules_which_might_emit(self.type):
                    if self._reads_this_max(rule.lhs) or ruleset.is_evaluating(rule):
                        continue
                    rule.results(ruleset)
                cached = ruleset.max_cache[self.type] = tuple(self._max_of(candidates))
        return list(cached)

    def _reads_this_max(self, lhs: Lhs) -> bool:
        return isinstance(lhs, TypeMaxLhs) and lhs.type == self.type

    def _max_of(self, candidates: List[Fnode]) -> List[Fnode]:
        if not candidates:
            return []
        best = max(fnode.score_for(self.type) for fnode in candidates)
        return [fnode for fnode in candidates if fnode.score_for(self.type) == best]


__all__ = ["Lhs", "DomLhs", "TypeLhs", "TypeMaxLhs"]
