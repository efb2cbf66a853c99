"""
Exercise Selection.

An exercise is eligible for a learner when:
- they have never submitted to it, or
- it is a grammar exercise they have submitted to fewer than
  GRAMMAR_MAX_EXPOSURES times (every attempt counts, correct or not)

Among eligible exercises at the requested level and kinds, one is picked
uniformly at random.
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from loguru import logger
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from kotoba.core.enums import ALL_EXERCISE_KINDS, ExerciseKind, Level
from kotoba.core.exceptions import ContentExhaustedError
from kotoba.db.models import Exercise, Submission

GRAMMAR_MAX_EXPOSURES = 2


class ExerciseSelector:
    """Picks the next exercise a learner has not exhausted."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def eligible_exercise_ids(
        self,
        session: Session,
        user_id: int,
        level: Level | str,
        kinds: Iterable[ExerciseKind | str] | None = None,
    ) -> list[int]:
        kind_values = [
            ExerciseKind(k).value for k in (ALL_EXERCISE_KINDS if kinds is None else kinds)
        ]
        if not kind_values:
            return []

        times_shown = (
            select(Submission.exercise_id, func.count().label("times_shown"))
            .where(Submission.user_id == user_id)
            .group_by(Submission.exercise_id)
            .subquery()
        )

        stmt = (
            select(Exercise.id)
            .outerjoin(times_shown, times_shown.c.exercise_id == Exercise.id)
            .where(
                Exercise.level == Level.parse(level).value,
                Exercise.type.in_(kind_values),
                or_(
                    times_shown.c.exercise_id.is_(None),
                    and_(
                        Exercise.type == ExerciseKind.GRAMMAR.value,
                        times_shown.c.times_shown < GRAMMAR_MAX_EXPOSURES,
                    ),
                ),
            )
            .order_by(Exercise.id)
        )
        return list(session.scalars(stmt))

    def next_exercise(
        self,
        session: Session,
        user_id: int,
        level: Level | str,
        kinds: Iterable[ExerciseKind | str] | None = None,
    ) -> Exercise:
        """
        Pick one eligible exercise at random.

        Raises:
            ContentExhaustedError: nothing eligible remains for level/kinds
        """
        candidates = self.eligible_exercise_ids(session, user_id, level, kinds)
        if not candidates:
            logger.info(f"Exercises exhausted for user {user_id} at level {level}")
            raise ContentExhaustedError(f"No exercises left at level {Level.parse(level).value}")

        exercise_id = self._rng.choice(candidates)
        logger.debug(f"Selected exercise {exercise_id} from {len(candidates)} candidates")
        return session.get(Exercise, exercise_id)

    def count_unsolved(self, session: Session, user_id: int, level: Level | str) -> int:
        """Exercises at ``level`` the user has never submitted to."""
        submitted = select(Submission.exercise_id).where(Submission.user_id == user_id)
        stmt = (
            select(func.count())
            .select_from(Exercise)
            .where(Exercise.level == Level.parse(level).value, Exercise.id.not_in(submitted))
        )
        return session.scalar(stmt) or 0
