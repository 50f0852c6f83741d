"""Fnodes: the per-element records of facts a bound ruleset derives."""
from __future__ import annotations

from typing import Any, Dict, List

from canopy.core.exceptions import NoteOverwriteError

from .models import TypeRecord


class Fnode:
    """Everything known about one element of a bound document.

    Scores and notes are kept per type. Rules only ever add to an fnode: a
    score is multiplied into, a note is set once.
    """

    def __init__(self, element: Any, *, default_score: float = 1.0) -> None:
        self.element = element
        self._default_score = default_score
        self._types: Dict[str, TypeRecord] = {}

    def __repr__(self) -> str:
        tag = getattr(self.element, "tag", self.element)
        return f"<Fnode {tag!s} types={self.types}>"

    @property
    def types(self) -> List[str]:
        return list(self._types)

    def has_type(self, type_name: str) -> bool:
        return type_name in self._types

    def score_for(self, type_name: str) -> float:
        record = self._types.get(type_name)
        return record.score if record is not None else self._default_score

    def note_for(self, type_name: str) -> Any:
        record = self._types.get(type_name)
        return record.note if record is not None else None

    def has_note_for(self, type_name: str) -> bool:
        return self.note_for(type_name) is not None

    def _record_for_setting(self, type_name: str) -> TypeRecord:
        record = self._types.get(type_name)
        if record is None:
            record = self._types[type_name] = TypeRecord(score=self._default_score)
        return record

    def multiply_score(self, type_name: str, factor: float) -> None:
        self._record_for_setting(type_name).score *= factor

    def conserve_score_from(self, source: "Fnode", source_type: str, target_type: str) -> None:
        """Multiply in ``source``'s score for ``source_type`` as our ``target_type`` score."""
        if source is self and source_type == target_type:
            # Already ours; multiplying again would square it.
            self._record_for_setting(target_type)
            return
        self.multiply_score(target_type, source.score_for(source_type))

    def set_note(self, type_name: str, note: Any) -> None:
        """Mark this fnode as having ``type_name`` and, if given, attach ``note``."""
        record = self._record_for_setting(type_name)
        if note is None:
            return
        if record.note is not None:
            raise NoteOverwriteError(
                f"Someone (likely the right-hand side of a rule) tried to add a note of "
                f"type {type_name!r} to an element, but one of that type already exists. "
                "Overwriting notes is not allowed, since it would make the order of rules matter.",
                context={"type": type_name, "element": self.element},
            )
        record.note = note


__all__ = ["Fnode"]
