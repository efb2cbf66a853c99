"""
Boundary to the external grading collaborator.

The engine never grades anything itself. It hands the outstanding item and
the learner's text to a Grader and applies a fixed correctness threshold to
the returned score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from kotoba.db.models import Exercise, Word

# Scores at or above this are correct, for every level and kind
CORRECT_SCORE_THRESHOLD = 80

GradableItem = Union[Exercise, Word]


@dataclass(frozen=True)
class GradeResult:
    """Grader verdict: score 0-100 plus free-text feedback."""

    score: int
    comment: str = ""
    suggestion: str = ""

    @property
    def is_correct(self) -> bool:
        return self.score >= CORRECT_SCORE_THRESHOLD

    @property
    def feedback_text(self) -> str:
        if self.suggestion:
            return f"{self.comment}\n\n{self.suggestion}"
        return self.comment


class Grader(Protocol):
    """Scores a learner's answer to an exercise or a vocabulary word."""

    def score(self, item: GradableItem, user_input: str) -> GradeResult: ...
