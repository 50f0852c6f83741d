"""
Rules, rulesets, and rulesets bound to a document.

A Ruleset is inert: it sorts its rules into inward ones (whose facts flow
back into the knowledgebase) and outward ones (named final outputs).
Binding it to a document with ``against()`` yields a BoundRuleset, which
evaluates rules on demand. Asking for an output pulls in exactly the rules
its left-hand side depends on, recursively, and each rule runs at most once
per BoundRuleset.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from canopy.core.config import EngineConfig
from canopy.core.exceptions import (
    CycleDetectedError,
    RuleDefinitionError,
    UnknownOutputKeyError,
    UnresolvableConservationSourceError,
    UnresolvableNoteTypeError,
    UnresolvableScoreTypeError,
)
from canopy.core.utils.profiling import count, span

from .fnode import Fnode
from .lhs import Lhs
from .query import ByExpression, ByKey, ByNode, Query, as_query
from .rhs import OutwardRhs, out

logger = logging.getLogger(__name__)


def rule(lhs: Any, rhs: Any) -> "Rule":
    """Construct the right kind of rule for the inwardness/outwardness of ``rhs``."""
    # out() is only valid on the RHS, so an outward RHS is always already an
    # OutwardRhs rather than a Side.
    return (OutwardRule if isinstance(rhs, OutwardRhs) else InwardRule)(lhs, rhs)


def ruleset(*rules: "Rule") -> "Ruleset":
    return Ruleset(*rules)


class Ruleset:
    """An unbound collection of rules."""

    def __init__(self, *rules: "Rule") -> None:
        self._in_rules: List[InwardRule] = []
        self._out_rules: Dict[Hashable, OutwardRule] = {}

        # Sorted here so mistakes raise early.
        for candidate in rules:
            if isinstance(candidate, InwardRule):
                self._in_rules.append(candidate)
            elif isinstance(candidate, OutwardRule):
                if candidate.key() in self._out_rules:
                    logger.debug("out() rule %r replaces an earlier one with the same key", candidate)
                self._out_rules[candidate.key()] = candidate
            else:
                raise RuleDefinitionError(
                    f"This input to ruleset() wasn't a rule: {candidate!r}",
                    context={"input": candidate},
                )
        logger.debug(
            "Built ruleset with %d inward and %d outward rule(s)",
            len(self._in_rules),
            len(self._out_rules),
        )

    def __len__(self) -> int:
        return len(self._in_rules) + len(self._out_rules)

    @property
    def in_rules(self) -> Tuple["InwardRule", ...]:
        return tuple(self._in_rules)

    @property
    def out_rules(self) -> Mapping[Hashable, "OutwardRule"]:
        return dict(self._out_rules)

    def against(self, doc: Any, *, config: Optional[EngineConfig] = None) -> "BoundRuleset":
        """Bind to a document. ``config`` defaults to bundled settings plus CANOPY_* overrides."""
        return BoundRuleset(doc, self._in_rules, self._out_rules, config=config or EngineConfig())


class BoundRuleset:
    """A ruleset earmarked to analyze one document, with its caches.

    Not safe to query from several threads at once.
    """

    def __init__(
        self,
        doc: Any,
        in_rules: Sequence["InwardRule"],
        out_rules: Mapping[Hashable, "OutwardRule"],
        *,
        config: EngineConfig,
    ) -> None:
        self.doc = doc
        self.config = config
        self._in_rules = in_rules
        self._out_rules = out_rules

        # For the use of rules and LHSs only:
        self.rule_cache: Dict[Rule, Tuple[Any, ...]] = {}  # rule => result fnodes or through() values
        self.max_cache: Dict[str, Tuple[Fnode, ...]] = {}  # type => max fnode(s) of that type
        self.type_cache: Dict[str, Tuple[Fnode, ...]] = {}  # type => all fnodes of that type
        self.element_cache: Dict[Any, Fnode] = {}  # element => fnode about it
        self._in_progress: Set[Rule] = set()

    def get(self, query: Any) -> Any:
        """Return results for ``query``.

        - ``ByKey(key)`` (or a string): the results of that out() rule, as a list
        - ``ByNode(element)`` (or an element): the fully annotated fnode. This
          runs every inward rule, not just the ones an output needs.
        - ``ByExpression(lhs)`` (or an LHS-like value): the matching fnodes,
          as a list. Each call wraps the expression in a new throwaway out()
          rule, so the rule-level cache never helps across calls; type-level
          caches still do.
        """
        resolved: Query = as_query(query)
        if isinstance(resolved, ByKey):
            try:
                out_rule = self._out_rules[resolved.key]
            except KeyError:
                raise UnknownOutputKeyError(resolved.key) from None
            return list(out_rule.results(self))
        if isinstance(resolved, ByNode):
            for in_rule in self._in_rules:
                in_rule.results(self)
            return self.fnode_for_element(resolved.element)
        if isinstance(resolved, ByExpression):
            return list(rule(resolved.lhs, out(object())).results(self))
        raise AssertionError(f"Unhandled query variant {resolved!r}")

    # -------- Methods below this point are for rules and LHSs. --------

    def rules_which_might_add(self, type_name: str) -> Iterator["InwardRule"]:
        """Inward rules we can't prove never add ``type_name`` to fnodes.

        A rule that both takes and emits a type is not considered to add it.
        """
        return (r for r in self._in_rules if r.might_add(type_name))

    def rules_which_might_emit(self, type_name: str) -> Iterator["InwardRule"]:
        """Inward rules that might set or rescore ``type_name`` on some fnode."""
        return (r for r in self._in_rules if r.might_emit(type_name))

    def fnode_for_element(self, element: Any) -> Fnode:
        fnode = self.element_cache.get(element)
        if fnode is None:
            fnode = self.element_cache[element] = Fnode(element, default_score=self.config.default_score)
        return fnode

    def is_evaluating(self, rule_: "Rule") -> bool:
        """Whether ``rule_`` is partway through computing its results."""
        return rule_ in self._in_progress

    def cached_results(self, rule_: "Rule", compute: Callable[["BoundRuleset"], Tuple[Any, ...]]) -> Tuple[Any, ...]:
        """Return ``rule_``'s results, computing them on first request."""
        try:
            cached = self.rule_cache[rule_]
        except KeyError:
            pass
        else:
            count("rules.cache.hit")
            logger.debug("Cache hit for %r", rule_)
            return cached

        if rule_ in self._in_progress and self.config.detect_cycles:
            raise CycleDetectedError(rule_)
        count("rules.cache.miss")
        logger.debug("Evaluating %r", rule_)
        self._in_progress.add(rule_)
        try:
            with span("rules.rule.results", rule=repr(rule_)):
                results = compute(self)
        finally:
            self._in_progress.discard(rule_)
        self.rule_cache[rule_] = results
        return results


class Rule:
    """Abstract: a normalized LHS and RHS.

    The in/out distinction lives here because rules are responsible for
    the rule-wise cache, and what gets cached depends on it.
    """

    def __init__(self, lhs: Any, rhs: Any) -> None:
        self.lhs: Lhs = _normalize(lhs, "as_lhs", "left")
        self.rhs = _normalize(rhs, "as_rhs", "right")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.lhs!r} -> {self.rhs!r})"

    def results(self, ruleset: BoundRuleset) -> Tuple[Any, ...]:
        raise NotImplementedError


def _normalize(operand: Any, method: str, side: str) -> Any:
    convert = getattr(operand, method, None)
    if not callable(convert):
        raise RuleDefinitionError(
            f"{operand!r} can't be used as the {side}-hand side of a rule.",
            context={"operand": operand},
        )
    return convert()


class InwardRule(Rule):
    """A rule whose facts flow back into the knowledgebase for further rules."""

    def results(self, ruleset: BoundRuleset) -> Tuple[Fnode, ...]:
        """Return the fnodes this rule's RHS touched, in first-touch order."""
        return ruleset.cached_results(self, self._compute_fnodes)

    def _compute_fnodes(self, ruleset: BoundRuleset) -> Tuple[Fnode, ...]:
        # LHSs uniquify themselves, but an RHS can redirect to another
        # element, so distinct inputs may land on the same fnode.
        returned: Dict[Fnode, None] = {}
        for left_fnode in self.lhs.fnodes(ruleset):
            returned[self._merge_fact(ruleset, left_fnode)] = None
        return tuple(returned)

    def _merge_fact(self, ruleset: BoundRuleset, left_fnode: Fnode) -> Fnode:
        fact = self.rhs.fact(left_fnode)
        self.lhs.check_fact(fact)
        right_fnode = ruleset.fnode_for_element(
            fact.element if fact.element is not None else left_fnode.element
        )
        left_type = self.lhs.guaranteed_type()
        right_type = fact.type if fact.type is not None else left_type

        if fact.conserve_score:
            # Never fall back to the RHS type's score on the left fnode: it
            # isn't guaranteed to be there, or to be final yet.
            if left_type is None:
                raise UnresolvableConservationSourceError(
                    f"conserve_score() was used in {self!r}, whose left-hand side has no "
                    "predictable type to conserve the score of.",
                    context={"rule": self},
                )
            right_fnode.conserve_score_from(left_fnode, left_type, right_type)
        if fact.score is not None:
            if right_type is None:
                raise UnresolvableScoreTypeError(
                    f"The right-hand side of {self!r} specified a score ({fact.score}) with "
                    "neither an explicit type nor one we could infer from the left-hand side.",
                    context={"rule": self, "score": fact.score},
                )
            right_fnode.multiply_score(right_type, fact.score)
        if fact.type is not None or fact.note is not None:
            if right_type is None:
                raise UnresolvableNoteTypeError(
                    f"The right-hand side of {self!r} specified a note ({fact.note!r}) with "
                    "neither an explicit type nor one we could infer from the left-hand side. "
                    "Notes are per-type, per-node, so that's a problem.",
                    context={"rule": self, "note": fact.note},
                )
            right_fnode.set_note(right_type, fact.note)
        return right_fnode

    def might_add(self, type_name: str) -> bool:
        """Return False if we can prove this rule never adds ``type_name``."""
        if type_name == self.lhs.guaranteed_type():
            # Can't *add* a type already on every incoming fnode.
            return False
        output_types = self.rhs.possible_types()
        if output_types:
            return type_name in output_types
        return True

    def might_emit(self, type_name: str) -> bool:
        """Return False if we can prove this rule never sets or rescores ``type_name``."""
        output_types = self.rhs.possible_types()
        if output_types:
            return type_name in output_types
        if self.rhs.may_choose_type():
            return True
        # With no type() call, facts default to the input type.
        return self.lhs.guaranteed_type() == type_name


class OutwardRule(Rule):
    """A rule whose RHS is an out(): a final goal of the ruleset."""

    def results(self, ruleset: BoundRuleset) -> Tuple[Any, ...]:
        """Return the LHS's fnodes, each passed through the RHS's through() callback."""
        return ruleset.cached_results(
            self,
            lambda bound: tuple(map(self.rhs.through_fn, self.lhs.fnodes(bound))),
        )

    def key(self) -> Hashable:
        """Return the key under which this rule's output is available."""
        return self.rhs.key


__all__ = ["rule", "ruleset", "Rule", "InwardRule", "OutwardRule", "Ruleset", "BoundRuleset"]
