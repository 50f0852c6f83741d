from __future__ import annotations

from typing import Any, Dict, Mapping


class CanopyError(Exception):
    """Base exception for canopy."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {k: repr(v) if not isinstance(v, (str, int, float, bool)) else v
                        for k, v in self.context.items()},
        }


class RuleDefinitionError(CanopyError, TypeError):
    """Raised when a rule or one of its sides is malformed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CanopyError.__init__(self, message, context=context)
        TypeError.__init__(self, message)


class UnknownOutputKeyError(CanopyError, LookupError):
    """Raised when a ruleset has no out() rule under the requested key."""

    def __init__(self, key: Any) -> None:
        message = f"There is no out() rule with key {key!r}."
        CanopyError.__init__(self, message, context={"key": key})
        LookupError.__init__(self, message)
        self.key = key


class UnsupportedQueryError(CanopyError, TypeError):
    """Raised when BoundRuleset.get() doesn't recognize what it was asked for."""

    def __init__(self, query: Any) -> None:
        message = (
            "BoundRuleset.get() expects an out() key, an expression like on the "
            f"left-hand side of a rule, or a document node; got {query!r}."
        )
        CanopyError.__init__(self, message, context={"query": query})
        TypeError.__init__(self, message)


class FactMergeError(CanopyError, ValueError):
    """Raised when a fact emitted by a right-hand side can't be merged into an fnode."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CanopyError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class UnresolvableConservationSourceError(FactMergeError):
    """conserve_score() was used on a left-hand side with no predictable type."""


class UnresolvableScoreTypeError(FactMergeError):
    """A score was given with neither an explicit nor an inferable type."""


class UnresolvableNoteTypeError(FactMergeError):
    """A type or note was given with neither an explicit nor an inferable type."""


class InvalidFactError(FactMergeError):
    """A left-hand side rejected a fact, or a props() callback returned junk."""


class NoteOverwriteError(FactMergeError):
    """A second note of the same type was set on one fnode."""


class CycleDetectedError(CanopyError, RuntimeError):
    """A rule was re-entered while its own results were being computed."""

    def __init__(self, rule: Any) -> None:
        message = (
            f"Rule {rule!r} depends on its own results. Rules whose left-hand "
            "sides need each other's output can't be evaluated."
        )
        CanopyError.__init__(self, message, context={"rule": rule})
        RuntimeError.__init__(self, message)
        self.rule = rule


class DocumentError(CanopyError, TypeError):
    """Raised when something that should be a document or node isn't."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CanopyError.__init__(self, message, context=context)
        TypeError.__init__(self, message)


class ConfigError(CanopyError, ValueError):
    """Raised when configuration can't be loaded or fails validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        CanopyError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


__all__ = [
    "CanopyError",
    "RuleDefinitionError",
    "UnknownOutputKeyError",
    "UnsupportedQueryError",
    "FactMergeError",
    "UnresolvableConservationSourceError",
    "UnresolvableScoreTypeError",
    "UnresolvableNoteTypeError",
    "InvalidFactError",
    "NoteOverwriteError",
    "CycleDetectedError",
    "DocumentError",
    "ConfigError",
]
