"""
Spaced-Repetition Scheduler for vocabulary review.

Implements a fixed-table interval schedule:
- A correct answer extends the streak and waits the next interval in the table
- An incorrect answer resets the streak to 0 and retries after 4 hours
- Intervals cap at the last table entry (30 days)

Review selection is strictly:
1. Due words (next_review <= now), most overdue first, random among ties
2. Words the learner has never reviewed, uniformly at random
Words scheduled in the future are never offered.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import Session

from kotoba.core.clock import Clock, utcnow
from kotoba.core.enums import Level
from kotoba.core.exceptions import ContentExhaustedError
from kotoba.db.database import dialect_insert
from kotoba.db.models import Word, WordReview

# =============================================================================
# Interval policy
# =============================================================================

# Hours to wait after the 1st, 2nd, 3rd ... consecutive correct review
DEFAULT_INTERVALS_HOURS: tuple[int, ...] = (4, 8, 24, 48, 168, 336, 720)
DEFAULT_RETRY_HOURS = 4


@dataclass(frozen=True)
class IntervalPolicy:
    """
    Interval table for the scheduler.

    The n-th consecutive correct review waits ``intervals_hours[n - 1]``
    (capped at the last entry). A failed review waits ``retry_hours``.
    """

    intervals_hours: tuple[int, ...] = DEFAULT_INTERVALS_HOURS
    retry_hours: int = DEFAULT_RETRY_HOURS

    def __post_init__(self) -> None:
        if not self.intervals_hours:
            raise ValueError("Interval table must not be empty")
        if any(h <= 0 for h in self.intervals_hours) or self.retry_hours <= 0:
            raise ValueError("Intervals must be positive")

    @staticmethod
    def next_repetition(prior_repetition: int, is_correct: bool) -> int:
        if not is_correct:
            return 0
        return prior_repetition + 1

    def interval_for(self, repetition: int) -> timedelta:
        """Wait before the next review, given the streak *after* this review."""
        if repetition <= 0:
            return timedelta(hours=self.retry_hours)
        index = min(repetition - 1, len(self.intervals_hours) - 1)
        return timedelta(hours=self.intervals_hours[index])

    @property
    def max_interval(self) -> timedelta:
        return timedelta(hours=self.intervals_hours[-1])


DEFAULT_INTERVAL_POLICY = IntervalPolicy()


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of recording one review."""

    word_id: int
    user_id: int
    is_correct: bool
    repetition: int
    next_review_at: datetime
    reviewed_at: datetime


# =============================================================================
# Scheduler
# =============================================================================


class SpacedRepetitionScheduler:
    """
    Records vocabulary reviews and picks the next word to review.

    All methods take the caller's session so a review can commit together
    with the rest of an answer's effects.
    """

    def __init__(
        self,
        policy: IntervalPolicy | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self.policy = policy or DEFAULT_INTERVAL_POLICY
        self._clock = clock or utcnow
        self._rng = rng or random.Random()

    def record_review(
        self,
        session: Session,
        word_id: int,
        user_id: int,
        is_correct: bool,
    ) -> ReviewOutcome:
        """
        Upsert the WordReview for (word, user) and schedule the next review.

        The streak is updated in a single UPDATE against the row, so two
        concurrent reviews of the same pair serialize on the row lock
        rather than both reading the same prior streak.
        """
        now = self._clock()
        insert = dialect_insert(session)

        # Lazily create the row; a no-op when it already exists
        session.execute(
            insert(WordReview)
            .values(word_id=word_id, user_id=user_id, repetition=0, next_review=now)
            .on_conflict_do_nothing(index_elements=["word_id", "user_id"])
        )

        pair = and_(WordReview.word_id == word_id, WordReview.user_id == user_id)
        new_repetition = WordReview.repetition + 1 if is_correct else 0
        session.execute(
            update(WordReview)
            .where(pair)
            .values(repetition=new_repetition, last_reviewed=now)
            .execution_options(synchronize_session=False)
        )
        repetition = session.scalar(select(WordReview.repetition).where(pair))

        next_review_at = now + self.policy.interval_for(repetition)
        session.execute(
            update(WordReview)
            .where(pair)
            .values(next_review=next_review_at)
            .execution_options(synchronize_session=False)
        )

        logger.debug(
            f"Review word={word_id} user={user_id} correct={is_correct} "
            f"-> rep={repetition}, next={next_review_at:%Y-%m-%d %H:%M}"
        )
        return ReviewOutcome(
            word_id=word_id,
            user_id=user_id,
            is_correct=is_correct,
            repetition=repetition,
            next_review_at=next_review_at,
            reviewed_at=now,
        )

    def next_word(self, session: Session, user_id: int, level: Level | str) -> Word:
        """
        Pick the next word for ``user_id`` at ``level``.

        Raises:
            ContentExhaustedError: nothing is due and every word has been seen
        """
        level_value = Level.parse(level).value
        now = self._clock()

        word_id = self._pick_due(session, user_id, level_value, now)
        if word_id is None:
            word_id = self._pick_unseen(session, user_id, level_value)
        if word_id is None:
            logger.info(f"No words due or unseen for user {user_id} at {level_value}")
            raise ContentExhaustedError(f"No words available at level {level_value}")

        return session.get(Word, word_id)

    def count_due_words(self, session: Session, user_id: int, level: Level | str) -> int:
        stmt = (
            select(func.count())
            .select_from(WordReview)
            .join(Word, Word.id == WordReview.word_id)
            .where(
                WordReview.user_id == user_id,
                Word.level == Level.parse(level).value,
                WordReview.next_review <= self._clock(),
            )
        )
        return session.scalar(stmt) or 0

    def _pick_due(self, session: Session, user_id: int, level: str, now: datetime) -> int | None:
        rows = session.execute(
            select(Word.id, WordReview.next_review)
            .join(WordReview, and_(WordReview.word_id == Word.id, WordReview.user_id == user_id))
            .where(Word.level == level, WordReview.next_review <= now)
            .order_by(WordReview.next_review.asc())
        ).all()
        if not rows:
            return None
        most_overdue = rows[0].next_review
        tied = [row.id for row in rows if row.next_review == most_overdue]
        return self._rng.choice(tied)

    def _pick_unseen(self, session: Session, user_id: int, level: str) -> int | None:
        candidates = session.scalars(
            select(Word.id)
            .outerjoin(WordReview, and_(WordReview.word_id == Word.id, WordReview.user_id == user_id))
            .where(Word.level == level, WordReview.id.is_(None))
        ).all()
        if not candidates:
            return None
        return self._rng.choice(candidates)
