"""
Per-user session state.

A learner is either Idle or AwaitingAnswer on exactly one item. The item
pointer that matters is chosen by the mode: in ``exercise`` mode only the
exercise pointer counts, in ``vocab`` mode only the word pointer. The
other pointer is inert.
"""

from __future__ import annotations

from dataclasses import dataclass

from kotoba.core.enums import StudyMode
from kotoba.core.exceptions import NoOutstandingItemError, OutstandingItemError
from kotoba.db.models import User


@dataclass(frozen=True)
class SessionState:
    mode: StudyMode
    exercise_id: int | None = None
    word_id: int | None = None

    @classmethod
    def from_user(cls, user: User) -> SessionState:
        mode = StudyMode(user.current_mode or StudyMode.EXERCISE.value)
        if mode is StudyMode.EXERCISE:
            return cls(mode=mode, exercise_id=user.current_exercise_id)
        return cls(mode=mode, word_id=user.current_word_id)

    @property
    def outstanding_id(self) -> int | None:
        return self.exercise_id if self.mode is StudyMode.EXERCISE else self.word_id

    @property
    def is_idle(self) -> bool:
        return self.outstanding_id is None

    @property
    def is_awaiting_answer(self) -> bool:
        return not self.is_idle

    @property
    def label(self) -> str:
        if self.is_idle:
            return f"Idle({self.mode.value})"
        return f"AwaitingAnswer({self.mode.value}:{self.outstanding_id})"

    def require_idle(self) -> None:
        if self.is_awaiting_answer:
            raise OutstandingItemError(
                f"Already have an outstanding {self.mode.value} item ({self.outstanding_id})"
            )

    def require_outstanding(self, mode: StudyMode | None = None) -> int:
        """Return the outstanding item id, optionally requiring a specific mode."""
        if self.is_idle or (mode is not None and self.mode is not mode):
            wanted = mode.value if mode else "item"
            raise NoOutstandingItemError(f"No outstanding {wanted} to answer")
        return self.outstanding_id
