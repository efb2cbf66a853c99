"""
Closed vocabularies shared by the engine.

Stored in the database as their string values.
"""

from __future__ import annotations

from enum import Enum

from kotoba.core.exceptions import InvalidLevelError


class Level(str, Enum):
    """JLPT-style difficulty tier, easiest first."""

    N5 = "N5"
    N4 = "N4"
    N3 = "N3"
    N2 = "N2"
    N1 = "N1"

    @property
    def rank(self) -> int:
        """Position in the ordering (0 = easiest)."""
        return list(Level).index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: str | Level) -> Level:
        """Parse a level string, raising InvalidLevelError for unknown values."""
        if isinstance(value, Level):
            return value
        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError) as e:
            raise InvalidLevelError(f"Unknown level: {value!r}") from e


DEFAULT_LEVEL = Level.N5


class ExerciseKind(str, Enum):
    """Exercise variant; each carries a different content payload."""

    TRANSLATION = "translation"
    QUESTION = "question"
    AUDIO = "audio"
    GRAMMAR = "grammar"


ALL_EXERCISE_KINDS: tuple[ExerciseKind, ...] = tuple(ExerciseKind)


class StudyMode(str, Enum):
    """How a free-text reply from the learner is interpreted."""

    EXERCISE = "exercise"
    VOCAB = "vocab"


class PeriodType(str, Enum):
    """Leaderboard bucket."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
