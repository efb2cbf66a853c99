"""
Typed content payloads.

Exercise content is a closed sum type keyed by ``type``: each exercise kind
has its own fixed set of fields. The database stores the payload as JSON
next to a ``type`` column; ``parse_exercise_content`` rebuilds the variant.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# =============================================================================
# Exercise variants
# =============================================================================


class TranslationContent(_Payload):
    """Sentence pair: learner translates ``translation`` into Japanese."""

    type: Literal["translation"] = "translation"
    japanese: str
    translation: str

    @property
    def prompt(self) -> str:
        return self.translation


class QuestionContent(_Payload):
    """Open question answered in Japanese."""

    type: Literal["question"] = "question"
    question: str

    @property
    def prompt(self) -> str:
        return self.question


class AudioContent(_Payload):
    """Listening comprehension: ``text`` is synthesized, ``question`` is asked."""

    type: Literal["audio"] = "audio"
    text: str
    question: str

    @property
    def prompt(self) -> str:
        return self.question


class GrammarContent(_Payload):
    """Grammar point; learner writes their own example sentence."""

    type: Literal["grammar"] = "grammar"
    grammar: str
    meaning: str
    structure: str = ""
    example: str = ""

    @property
    def prompt(self) -> str:
        return self.grammar


ExerciseContent = Annotated[
    Union[TranslationContent, QuestionContent, AudioContent, GrammarContent],
    Field(discriminator="type"),
]

_exercise_content_adapter: TypeAdapter[ExerciseContent] = TypeAdapter(ExerciseContent)


def parse_exercise_content(kind: str, raw: dict[str, Any] | None) -> ExerciseContent:
    """Build the payload variant for ``kind`` from its stored JSON."""
    data = dict(raw or {})
    data["type"] = kind
    return _exercise_content_adapter.validate_python(data)


def dump_exercise_content(content: ExerciseContent) -> dict[str, Any]:
    """JSON-ready dict without the discriminator (it lives in its own column)."""
    return content.model_dump(exclude={"type"})


# =============================================================================
# Vocabulary
# =============================================================================


class SentenceFragment(_Payload):
    """A piece of an example sentence with optional furigana reading."""

    fragment: str
    furigana: str | None = None

    def render(self) -> str:
        if self.furigana:
            return f"{self.fragment}({self.furigana})"
        return self.fragment


class WordExample(_Payload):
    sentence: list[SentenceFragment] = Field(default_factory=list)
    translation: str = ""

    def render(self) -> str:
        """Annotated Japanese sentence, e.g. ``猫(ねこ)がいる``."""
        return "".join(part.render() for part in self.sentence)


_examples_adapter: TypeAdapter[list[WordExample]] = TypeAdapter(list[WordExample])


def parse_word_examples(raw: list[dict[str, Any]] | None) -> list[WordExample]:
    return _examples_adapter.validate_python(raw or [])


class WordEntry(_Payload):
    """A vocabulary word as produced by the content generator."""

    kanji: str | None = None
    kana: str
    translation: str
    level: str
    examples: list[WordExample] = Field(default_factory=list)
    audio_url: str = ""
