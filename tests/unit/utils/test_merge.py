from __future__ import annotations

from canopy.core.utils.merge import deep_merge


def test_nested_mappings_merge() -> None:
    merged = deep_merge({"engine": {"detectCycles": True}}, {"engine": {"defaultScore": 2}})

    assert merged == {"engine": {"detectCycles": True, "defaultScore": 2}}


def test_lists_and_scalars_are_replaced() -> None:
    assert deep_merge({"a": [1, 2], "b": 1}, {"a": [3], "b": 2}) == {"a": [3], "b": 2}


def test_inputs_are_not_mutated() -> None:
    base = {"engine": {"detectCycles": True}}

    deep_merge(base, {"engine": {"detectCycles": False}})

    assert base == {"engine": {"detectCycles": True}}
