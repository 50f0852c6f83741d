"""Side chains and the LHS/RHS objects they turn into."""
from __future__ import annotations

import pytest

from canopy.core.exceptions import InvalidFactError, RuleDefinitionError
from canopy.core.rules import (
    DomLhs,
    Fact,
    Fnode,
    InwardRhs,
    OutwardRhs,
    TypeLhs,
    TypeMaxLhs,
    conserve_score,
    dom,
    element,
    note,
    out,
    props,
    score,
    type_,
)


def test_lhs_forms() -> None:
    assert isinstance(dom("p").as_lhs(), DomLhs)
    assert type(type_("a").as_lhs()) is TypeLhs
    assert isinstance(type_("a").max().as_lhs(), TypeMaxLhs)


@pytest.mark.parametrize(
    "side",
    [
        score(2),
        dom("p").max(),
        type_("a").max().max(),
        type_("a").note(lambda fnode: 1),
        dom("p").type("a"),
    ],
)
def test_invalid_lhs_chains(side) -> None:
    with pytest.raises(RuleDefinitionError):
        side.as_lhs()


def test_invalid_rhs_chains() -> None:
    with pytest.raises(RuleDefinitionError):
        dom("p").as_rhs()
    with pytest.raises(RuleDefinitionError):
        type_("a").max().as_rhs()
    with pytest.raises(RuleDefinitionError):
        note("not callable").as_rhs()
    with pytest.raises(RuleDefinitionError):
        score("high").as_rhs()


def test_invalid_arguments_fail_when_written() -> None:
    with pytest.raises(RuleDefinitionError):
        dom(3)
    with pytest.raises(RuleDefinitionError):
        type_(None)
    with pytest.raises(RuleDefinitionError):
        out(["unhashable"])
    with pytest.raises(RuleDefinitionError):
        out("k").through("not callable")


def test_lhs_type_guarantees() -> None:
    assert dom("p").as_lhs().guaranteed_type() is None
    assert dom("p").as_lhs().possible_types() == frozenset()
    assert type_("a").as_lhs().guaranteed_type() == "a"
    assert type_("a").max().as_lhs().possible_types() == frozenset({"a"})


def test_fact_applies_calls_in_order() -> None:
    fnode = Fnode("el")
    rhs = (
        type_("a")
        .score(2)
        .score(lambda f: 3)
        .note(lambda f: {"seen": f.element})
        .element(lambda f: "other")
        .conserve_score()
        .as_rhs()
    )

    assert rhs.fact(fnode) == Fact(
        type="a", score=6, note={"seen": "el"}, element="other", conserve_score=True
    )


def test_props_merge_into_fact() -> None:
    rhs = type_("a").props(lambda f: {"type": "b", "score": 4, "note": "n"}).as_rhs()

    assert rhs.fact(Fnode("el")) == Fact(type="b", score=4, note="n")


def test_props_reject_unknown_keys_and_non_mappings() -> None:
    with pytest.raises(InvalidFactError):
        props(lambda f: {"colour": "red"}).as_rhs().fact(Fnode("el"))
    with pytest.raises(InvalidFactError):
        props(lambda f: ["type", "a"]).as_rhs().fact(Fnode("el"))


def test_possible_types() -> None:
    assert type_("a").as_rhs().possible_types() == frozenset({"a"})
    assert type_("a").type("b").as_rhs().possible_types() == frozenset({"b"})
    assert score(2).as_rhs().possible_types() == frozenset()
    assert type_("a").props(lambda f: {}).as_rhs().possible_types() == frozenset()
    assert props(lambda f: {}).type("c").as_rhs().possible_types() == frozenset({"c"})


def test_may_choose_type() -> None:
    assert props(lambda f: {}).as_rhs().may_choose_type() is True
    assert props(lambda f: {}).type("c").as_rhs().may_choose_type() is False
    assert conserve_score().as_rhs().may_choose_type() is False


def test_outward_rhs() -> None:
    plain = out("k")
    upper = plain.through(str.upper)

    assert isinstance(plain, OutwardRhs)
    assert plain.as_rhs() is plain
    assert plain.through_fn("x") == "x"
    assert upper.key == "k"
    assert upper.through_fn("x") == "X"
    assert plain.through_fn("x") == "x"


def test_rhs_and_lhs_objects_normalize_to_themselves() -> None:
    rhs = InwardRhs([("type", ("a",))])
    lhs = dom("p").as_lhs()

    assert rhs.as_rhs() is rhs
    assert lhs.as_lhs() is lhs


def test_side_repr_reads_like_source() -> None:
    assert repr(type_("a").max()) == "type_('a').max()"
    assert repr(dom("p")) == "dom('p')"
    assert repr(element(len)).startswith("element(")
