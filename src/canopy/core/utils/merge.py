"""Deep merge for layered configuration.

Later layers win. Nested mappings merge key by key; every other value
(lists included) is replaced wholesale.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` without mutating either.

    Example:
        >>> deep_merge({"engine": {"detectCycles": True}}, {"engine": {"defaultScore": 2}})
        {'engine': {'detectCycles': True, 'defaultScore': 2}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


__all__ = ["deep_merge"]
