"""End-to-end behavior of bound rulesets."""
from __future__ import annotations

import pytest

from canopy import conserve_score, dom, note, out, rule, ruleset, score, type_
from canopy.core.config import EngineConfig
from canopy.core.exceptions import UnresolvableNoteTypeError

from conftest import find


def _prose_length(fnode) -> int:
    return len(fnode.element.text or "")


def test_best_paragraph_is_single_highest_scorer(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(_prose_length)),
        rule(type_("paragraph").max(), out("best")),
    )

    best = rules.against(doc, config=config).get("best")

    assert len(best) == 1
    assert best[0].element is find(doc, "p", "long")
    assert best[0].score_for("paragraph") == len("A much longer paragraph of actual prose.")


def test_constant_scores_tie_and_return_every_max(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(2)),
        rule(type_("paragraph").max(), out("best")),
    )

    best = rules.against(doc, config=config).get("best")

    assert [f.element.get("id") for f in best] == ["short", "long"]
    assert all(f.score_for("paragraph") == 2 for f in best)


def test_conserved_score_propagates_to_new_type(doc, config) -> None:
    rules = ruleset(
        rule(dom("h1"), type_("t1").score(3)),
        rule(type_("t1"), type_("t2").conserve_score()),
        rule(type_("t2"), out("t2s")),
    )
    bound = rules.against(doc, config=config)

    (t2,) = bound.get("t2s")

    assert t2.element is find(doc, "h1")
    assert t2.score_for("t1") == 3
    assert t2.score_for("t2") == 3


def test_conserved_score_multiplies_with_explicit_score(doc, config) -> None:
    rules = ruleset(
        rule(dom("h1"), type_("t1").score(3)),
        rule(type_("t1"), conserve_score().type("t2").score(5)),
        rule(type_("t2"), out("t2s")),
    )

    (t2,) = rules.against(doc, config=config).get("t2s")

    assert t2.score_for("t2") == 15


def test_note_without_any_type_is_rejected(doc, config) -> None:
    rules = ruleset(rule(dom("p"), note(lambda fnode: "seen")))

    with pytest.raises(UnresolvableNoteTypeError):
        rules.against(doc, config=config).get(find(doc, "p", "short"))


def test_querying_a_node_fully_annotates_it(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(2)),
        rule(type_("paragraph"), type_("prose").note(lambda fnode: fnode.element.get("id"))),
        rule(dom("h1"), type_("heading")),
    )
    bound = rules.against(doc, config=config)

    fnode = bound.get(find(doc, "p", "long"))

    assert fnode.types == ["paragraph", "prose"]
    assert fnode.score_for("paragraph") == 2
    assert fnode.note_for("prose") == "long"


def test_untouched_node_gets_an_empty_fnode(doc, config) -> None:
    rules = ruleset(rule(dom("p"), type_("paragraph")))
    bound = rules.against(doc, config=config)

    fnode = bound.get(find(doc, "footer"))

    assert fnode.types == []
    assert fnode.element is find(doc, "footer")


def test_through_transforms_outward_results(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph")),
        rule(type_("paragraph"), out("ids").through(lambda fnode: fnode.element.get("id"))),
    )

    assert rules.against(doc, config=config).get("ids") == ["short", "long"]


def test_chained_inference_only_runs_reachable_rules(doc, config) -> None:
    calls = []

    def tracked(label):
        def _score(fnode):
            calls.append(label)
            return 1
        return _score

    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(tracked("paragraph"))),
        rule(dom("h1"), type_("heading").score(tracked("heading"))),
        rule(type_("paragraph"), out("paragraphs")),
    )

    rules.against(doc, config=config).get("paragraphs")

    assert calls == ["paragraph", "paragraph"]


def test_same_type_refinement_can_change_the_max(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(_prose_length)),
        rule(type_("paragraph"), score(lambda fnode: 100 if fnode.element.get("id") == "short" else 1)),
        rule(type_("paragraph").max(), out("best")),
    )

    best = rules.against(doc, config=config).get("best")

    assert [f.element.get("id") for f in best] == ["short"]
    assert best[0].score_for("paragraph") == len("Hi.") * 100


def test_boosting_the_best_paragraph(doc, config) -> None:
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(_prose_length)),
        rule(type_("paragraph").max(), score(2)),
        rule(type_("paragraph").max(), out("best")),
    )
    bound = rules.against(doc, config=config)
    long_p = find(doc, "p", "long")

    best = bound.get("best")
    assert [f.element for f in best] == [long_p]

    boosted = bound.get(long_p)
    assert boosted.score_for("paragraph") == len(long_p.text) * 2
    assert bound.get(find(doc, "p", "short")).score_for("paragraph") == len("Hi.")


@pytest.mark.parametrize("detect_cycles", [True, False])
def test_noting_the_best_paragraph(doc, detect_cycles) -> None:
    config = EngineConfig.from_mapping({"engine": {"detectCycles": detect_cycles}})
    rules = ruleset(
        rule(dom("p"), type_("paragraph").score(_prose_length)),
        rule(type_("paragraph").max(), note(lambda fnode: "winner")),
    )
    bound = rules.against(doc, config=config)

    assert bound.get(find(doc, "p", "long")).note_for("paragraph") == "winner"
    assert bound.get(find(doc, "p", "short")).note_for("paragraph") is None
