"""
Data models for the rules engine.

- Fact: what a right-hand side says about one input fnode
- TypeRecord: an fnode's score and note for one type
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Fact:
    """The output of an RHS for one input fnode.

    Attributes:
        type: Output type; when None, the LHS's guaranteed type is used
        score: Multiplier folded into the target fnode's score for the type
        note: Arbitrary payload stored per type, per fnode
        element: Element to attach the fact to instead of the matched one
        conserve_score: Carry the input type's score over to the output type
    """

    type: Optional[str] = None
    score: Optional[float] = None
    note: Any = None
    element: Any = None
    conserve_score: bool = False

    def is_empty(self) -> bool:
        return (
            self.type is None
            and self.score is None
            and self.note is None
            and not self.conserve_score
        )


@dataclass
class TypeRecord:
    score: float
    note: Any = None


__all__ = ["Fact", "TypeRecord"]
