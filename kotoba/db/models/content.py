"""
Content Store models.

Exercises and vocabulary words are created by an external generator and
never mutated by the engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kotoba.content.payloads import (
    ExerciseContent,
    WordExample,
    parse_exercise_content,
    parse_word_examples,
)
from kotoba.core.clock import utcnow

from .base import Base


class Exercise(Base):
    """An exercise of one kind at one level. ``content`` shape depends on ``type``."""

    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level: Mapped[str] = mapped_column(String(8), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="translation")
    content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    __table_args__ = (Index("idx_exercises_level_type", "level", "type"),)

    def __repr__(self) -> str:
        return f"<Exercise id={self.id} level={self.level} type={self.type}>"

    @property
    def payload(self) -> ExerciseContent:
        """Typed content variant for this exercise's kind."""
        return parse_exercise_content(self.type, self.content)


class Word(Base):
    """A vocabulary word. Displayed by kanji form, falling back to kana."""

    __tablename__ = "words"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kanji: Mapped[str | None] = mapped_column(Text)
    kana: Mapped[str] = mapped_column(Text, nullable=False)
    translation: Mapped[str] = mapped_column(Text, nullable=False)
    examples_json: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON)
    level: Mapped[str] = mapped_column(String(8), nullable=False, index=True)
    audio_url: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    def __repr__(self) -> str:
        return f"<Word id={self.id} level={self.level} form={self.display_form}>"

    @property
    def display_form(self) -> str:
        return self.kanji or self.kana

    @property
    def examples(self) -> list[WordExample]:
        return parse_word_examples(self.examples_json)
