"""
Content Store: read-mostly access to exercises and vocabulary words.

The engine only reads content. The append operations exist for the
external generator and are all-or-nothing within the caller's session.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from kotoba.content.payloads import ExerciseContent, WordEntry, dump_exercise_content
from kotoba.core.enums import ExerciseKind, Level
from kotoba.core.exceptions import ContentNotFoundError
from kotoba.db.models import Exercise, Submission, Word


class ContentStore:
    """Lookups and batch inserts for exercises and words."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_exercises_by_level(
        self,
        session: Session,
        level: Level | str,
        kinds: Iterable[ExerciseKind | str] | None = None,
    ) -> list[Exercise]:
        stmt = select(Exercise).where(Exercise.level == Level.parse(level).value)
        if kinds is not None:
            stmt = stmt.where(Exercise.type.in_([ExerciseKind(k).value for k in kinds]))
        return list(session.scalars(stmt.order_by(Exercise.id)))

    def get_exercise_by_id(self, session: Session, exercise_id: int) -> Exercise:
        exercise = session.get(Exercise, exercise_id)
        if exercise is None:
            raise ContentNotFoundError(f"Exercise {exercise_id} not found")
        return exercise

    def get_word_by_id(self, session: Session, word_id: int) -> Word:
        word = session.get(Word, word_id)
        if word is None:
            raise ContentNotFoundError(f"Word {word_id} not found")
        return word

    def get_submission(self, session: Session, submission_id: int) -> Submission:
        """Fetch a submission together with the exercise it answered."""
        submission = session.scalars(
            select(Submission)
            .options(joinedload(Submission.exercise))
            .where(Submission.id == submission_id)
        ).first()
        if submission is None:
            raise ContentNotFoundError(f"Submission {submission_id} not found")
        return submission

    def content_counts(self, session: Session) -> dict[str, int]:
        """Row counts, used to tell whether the store has been populated."""
        return {
            "exercises": session.scalar(select(func.count()).select_from(Exercise)) or 0,
            "words": session.scalar(select(func.count()).select_from(Word)) or 0,
        }

    # ------------------------------------------------------------------
    # Appends
    # ------------------------------------------------------------------

    def save_exercises_batch(
        self,
        session: Session,
        level: Level | str,
        contents: Sequence[ExerciseContent],
    ) -> list[Exercise]:
        level_value = Level.parse(level).value
        exercises = [
            Exercise(level=level_value, type=content.type, content=dump_exercise_content(content))
            for content in contents
        ]
        session.add_all(exercises)
        session.flush()
        logger.info(f"Saved {len(exercises)} exercises for level {level_value}")
        return exercises

    def save_words_batch(self, session: Session, entries: Sequence[WordEntry]) -> list[Word]:
        words = [
            Word(
                kanji=entry.kanji,
                kana=entry.kana,
                translation=entry.translation,
                examples_json=[example.model_dump() for example in entry.examples],
                level=Level.parse(entry.level).value,
                audio_url=entry.audio_url,
            )
            for entry in entries
        ]
        session.add_all(words)
        session.flush()
        logger.info(f"Saved {len(words)} words")
        return words
