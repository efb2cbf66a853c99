"""
Learner models: users, their review state and their submission history.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kotoba.core.clock import utcnow

from .base import Base
from .content import Exercise, Word


class User(Base):
    """
    A learner, identified externally by their Telegram id.

    ``current_exercise_id`` / ``current_word_id`` together with
    ``current_mode`` form the session state; read them through
    ``kotoba.study.session_state.SessionState.from_user`` rather than
    directly, since only the pointer selected by the mode is meaningful.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    telegram_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)

    # Public identity (leaderboard)
    username: Mapped[str | None] = mapped_column(Text)
    first_name: Mapped[str | None] = mapped_column(Text)
    last_name: Mapped[str | None] = mapped_column(Text)
    avatar_url: Mapped[str | None] = mapped_column(Text)

    # Progress
    level: Mapped[str] = mapped_column(String(8), default="N5", nullable=False)
    points: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    exercises_done: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Session state
    current_exercise_id: Mapped[int | None] = mapped_column(ForeignKey("exercises.id"))
    current_word_id: Mapped[int | None] = mapped_column(ForeignKey("words.id"))
    current_mode: Mapped[str] = mapped_column(String(16), default="exercise", nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} telegram_id={self.telegram_id} level={self.level} mode={self.current_mode}>"


class WordReview(Base):
    """Spaced-repetition state for one (word, user) pair."""

    __tablename__ = "word_reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(ForeignKey("words.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    repetition: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    next_review: Mapped[datetime] = mapped_column(nullable=False)
    last_reviewed: Mapped[datetime | None] = mapped_column()

    word: Mapped[Word] = relationship()

    __table_args__ = (
        UniqueConstraint("word_id", "user_id", name="uq_word_reviews_word_user"),
        Index("idx_word_reviews_user_due", "user_id", "next_review"),
    )

    def __repr__(self) -> str:
        return f"<WordReview word={self.word_id} user={self.user_id} rep={self.repetition} next={self.next_review}>"


class Submission(Base):
    """One graded attempt at an exercise. Append-only."""

    __tablename__ = "user_submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id"), nullable=False)
    user_input: Mapped[str] = mapped_column(Text, nullable=False)
    feedback: Mapped[str] = mapped_column(Text, default="")
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    exercise: Mapped[Exercise] = relationship()

    __table_args__ = (Index("idx_submissions_user_exercise", "user_id", "exercise_id"),)

    def __repr__(self) -> str:
        return f"<Submission id={self.id} user={self.user_id} exercise={self.exercise_id} correct={self.is_correct}>"
