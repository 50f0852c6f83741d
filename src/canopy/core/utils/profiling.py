"""Opt-in profiling of rule evaluation.

Nothing is recorded unless a Profiler has been activated with
``enable_profiler``; ``span`` and ``count`` are no-ops otherwise. The active
profiler lives in a ContextVar so bound rulesets need no extra plumbing.
"""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, asdict
from time import perf_counter
from typing import Any, Dict, Iterator, List, Optional


_ACTIVE_PROFILER: ContextVar["Profiler | None"] = ContextVar("_ACTIVE_PROFILER", default=None)


@dataclass(frozen=True)
class SpanRecord:
    name: str
    duration_ms: float
    depth: int
    meta: Dict[str, Any]


class Profiler:
    """Collects nested timing spans and named event counters."""

    def __init__(self) -> None:
        self._spans: List[SpanRecord] = []
        self._counters: Counter[str] = Counter()
        self._depth = 0

    @property
    def spans(self) -> List[SpanRecord]:
        return list(self._spans)

    @property
    def counters(self) -> Dict[str, int]:
        return dict(self._counters)

    @contextmanager
    def span(self, name: str, **meta: Any) -> Iterator[None]:
        start = perf_counter()
        depth = self._depth
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            self._spans.append(
                SpanRecord(
                    name=name,
                    duration_ms=(perf_counter() - start) * 1000.0,
                    depth=depth,
                    meta=dict(meta),
                )
            )

    def count(self, name: str, n: int = 1) -> None:
        self._counters[name] += n

    def summary_ms(self) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for record in self._spans:
            totals[record.name] = totals.get(record.name, 0.0) + record.duration_ms
        return totals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spans": [asdict(s) for s in self._spans],
            "counters": self.counters,
            "summary_ms": self.summary_ms(),
        }


@contextmanager
def enable_profiler(profiler: Profiler) -> Iterator[Profiler]:
    token = _ACTIVE_PROFILER.set(profiler)
    try:
        yield profiler
    finally:
        _ACTIVE_PROFILER.reset(token)


@contextmanager
def span(name: str, **meta: Any) -> Iterator[None]:
    profiler = _ACTIVE_PROFILER.get()
    if profiler is None:
        yield
        return
    with profiler.span(name, **meta):
        yield


def count(name: str, n: int = 1) -> None:
    profiler = _ACTIVE_PROFILER.get()
    if profiler is not None:
        profiler.count(name, n)


def get_active_profiler() -> Optional[Profiler]:
    return _ACTIVE_PROFILER.get()


__all__ = ["Profiler", "SpanRecord", "enable_profiler", "span", "count", "get_active_profiler"]
