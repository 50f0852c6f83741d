"""Shared helpers: config merging, logging setup, profiling."""
from __future__ import annotations

from .merge import deep_merge
from .logging_setup import configure_logging, reset_logging_for_tests
from .profiling import Profiler, enable_profiler, span, count

__all__ = [
    "deep_merge",
    "configure_logging",
    "reset_logging_for_tests",
    "Profiler",
    "enable_profiler",
    "span",
    "count",
]
