"""
Content: typed exercise/word payloads.

The Content Store lives in ``kotoba.content.store``; it is not re-exported
here because the ORM models import these payloads.
"""

from kotoba.content.payloads import (
    AudioContent,
    ExerciseContent,
    GrammarContent,
    QuestionContent,
    SentenceFragment,
    TranslationContent,
    WordEntry,
    WordExample,
    parse_exercise_content,
)

__all__ = [
    "AudioContent",
    "ExerciseContent",
    "GrammarContent",
    "QuestionContent",
    "SentenceFragment",
    "TranslationContent",
    "WordEntry",
    "WordExample",
    "parse_exercise_content",
]
