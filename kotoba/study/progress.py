"""
User Progress Tracker - the per-learner session state machine.

States: Idle or AwaitingAnswer(item), crossed with mode (exercise | vocab).

Transitions:
    request_exercise   Idle -> AwaitingAnswer(exercise)
    request_vocab      Idle -> AwaitingAnswer(word)
    submit_answer      exercise correct   -> Idle, +1 leaderboard
                       exercise incorrect -> unchanged
                       vocab correct      -> Idle, +0.5 points, +1 leaderboard
                       vocab incorrect    -> unchanged (drill until correct)
    reveal_answer      vocab: records a failed review, word stays outstanding
    reset              any -> Idle
    change_level       any -> Idle at the new level

Every transition is a single transaction. Claiming an item and clearing it
are conditional UPDATEs on the user row, so concurrent requests for the same
learner cannot both claim an item or both settle the same answer.
Grading runs between transactions because it is slow and external.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker

from config import Settings, get_settings
from kotoba.content.store import ContentStore
from kotoba.core.clock import Clock, utcnow
from kotoba.core.enums import ALL_EXERCISE_KINDS, ExerciseKind, Level, PeriodType, StudyMode
from kotoba.core.exceptions import NoOutstandingItemError, OutstandingItemError
from kotoba.db.database import session_scope
from kotoba.db.models import Exercise, Submission, User, Word
from kotoba.leaderboard.aggregator import (
    POINTS_PER_CORRECT_ANSWER,
    LeaderboardAggregator,
    LeaderboardEntry,
)
from kotoba.study.grading import Grader, GradeResult
from kotoba.study.scheduler import ReviewOutcome, SpacedRepetitionScheduler
from kotoba.study.selector import ExerciseSelector
from kotoba.study.session_state import SessionState
from kotoba.study.users import UserDirectory

# Added to User.points for each correctly translated word
VOCAB_POINTS_PER_CORRECT = 0.5


@dataclass(frozen=True)
class AnswerResult:
    """What happened when a learner answered their outstanding item."""

    mode: StudyMode
    item_id: int
    is_correct: bool
    grade: GradeResult
    state: SessionState
    submission_id: int | None = None
    review: ReviewOutcome | None = None

    @property
    def feedback(self) -> str:
        return self.grade.feedback_text


@dataclass(frozen=True)
class RevealedWord:
    word: Word
    review: ReviewOutcome


class ProgressTracker:
    """
    Owns learner session state and orchestrates selection, grading,
    scheduling and leaderboard updates.
    """

    def __init__(
        self,
        grader: Grader,
        session_factory: sessionmaker[Session] | None = None,
        selector: ExerciseSelector | None = None,
        scheduler: SpacedRepetitionScheduler | None = None,
        leaderboard: LeaderboardAggregator | None = None,
        content: ContentStore | None = None,
        users: UserDirectory | None = None,
        exercise_kinds: Iterable[ExerciseKind | str] | None = None,
        clock: Clock | None = None,
    ):
        self.grader = grader
        self.session_factory = session_factory
        self.selector = selector or ExerciseSelector()
        self.scheduler = scheduler or SpacedRepetitionScheduler()
        self.leaderboard = leaderboard or LeaderboardAggregator()
        self.content = content or ContentStore()
        self.users = users or UserDirectory()
        self.exercise_kinds = tuple(
            ExerciseKind(k) for k in (exercise_kinds if exercise_kinds is not None else ALL_EXERCISE_KINDS)
        )
        self._clock = clock or utcnow

    def _transaction(self):
        return session_scope(self.session_factory)

    # =========================================================================
    # Users
    # =========================================================================

    def ensure_user(
        self,
        external_id: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        with self._transaction() as session:
            return self.users.ensure_user(session, external_id, username, first_name, last_name)

    def get_user(self, external_id: int) -> User:
        with self._transaction() as session:
            return self.users.get(session, external_id)

    def get_state(self, external_id: int) -> SessionState:
        return SessionState.from_user(self.get_user(external_id))

    # =========================================================================
    # Requests
    # =========================================================================

    def request_exercise(
        self, external_id: int, kinds: Iterable[ExerciseKind | str] | None = None
    ) -> Exercise:
        """
        Select an exercise and mark it outstanding.

        Raises:
            OutstandingItemError: an exercise or word is already outstanding
            ContentExhaustedError: nothing eligible remains at the user's level
        """
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            SessionState.from_user(user).require_idle()

            exercise = self.selector.next_exercise(
                session, user.id, user.level, kinds if kinds is not None else self.exercise_kinds
            )
            self._claim(session, user, StudyMode.EXERCISE, exercise.id)

        logger.info(f"User {external_id}: sent exercise {exercise.id} ({exercise.type})")
        return exercise

    def request_vocab(self, external_id: int) -> Word:
        """
        Select the next word to review and mark it outstanding.

        Raises:
            OutstandingItemError: an exercise or word is already outstanding
            ContentExhaustedError: no word is due or unseen at the user's level
        """
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            SessionState.from_user(user).require_idle()

            word = self.scheduler.next_word(session, user.id, user.level)
            self._claim(session, user, StudyMode.VOCAB, word.id)

        logger.info(f"User {external_id}: sent word {word.id}")
        return word

    def _claim(self, session: Session, user: User, mode: StudyMode, item_id: int) -> None:
        """Compare-and-set the outstanding item; fails if anything is already claimed."""
        column = "current_exercise_id" if mode is StudyMode.EXERCISE else "current_word_id"
        result = session.execute(
            update(User)
            .where(
                User.id == user.id,
                User.current_exercise_id.is_(None),
                User.current_word_id.is_(None),
            )
            .values({column: item_id, "current_mode": mode.value, "updated_at": self._clock()})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"User {user.telegram_id}: concurrent request already claimed an item")
            raise OutstandingItemError("Already have an outstanding item")

    # =========================================================================
    # Answers
    # =========================================================================

    def submit_answer(self, external_id: int, user_input: str) -> AnswerResult:
        """
        Grade ``user_input`` against the outstanding item and apply the outcome.

        Raises:
            NoOutstandingItemError: nothing to answer, or a concurrent answer
                already settled this item
        """
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            state = SessionState.from_user(user)
            item_id = state.require_outstanding()
            user_id = user.id
            if state.mode is StudyMode.EXERCISE:
                item: Exercise | Word = self.content.get_exercise_by_id(session, item_id)
            else:
                item = self.content.get_word_by_id(session, item_id)

        grade = self.grader.score(item, user_input)
        logger.info(
            f"User {external_id}: {state.mode.value} {item_id} scored {grade.score} "
            f"({'correct' if grade.is_correct else 'incorrect'})"
        )

        if state.mode is StudyMode.EXERCISE:
            return self._settle_exercise(user_id, item_id, user_input, grade)
        return self._settle_word(user_id, item_id, grade)

    def _settle_exercise(
        self, user_id: int, exercise_id: int, user_input: str, grade: GradeResult
    ) -> AnswerResult:
        with self._transaction() as session:
            if grade.is_correct:
                self._release(session, user_id, StudyMode.EXERCISE, exercise_id)
                self.leaderboard.award_points(session, user_id, POINTS_PER_CORRECT_ANSWER)

            submission = Submission(
                user_id=user_id,
                exercise_id=exercise_id,
                user_input=user_input,
                feedback=grade.feedback_text,
                is_correct=grade.is_correct,
            )
            session.add(submission)
            session.flush()

            state = SessionState(
                mode=StudyMode.EXERCISE,
                exercise_id=None if grade.is_correct else exercise_id,
            )
            return AnswerResult(
                mode=StudyMode.EXERCISE,
                item_id=exercise_id,
                is_correct=grade.is_correct,
                grade=grade,
                state=state,
                submission_id=submission.id,
            )

    def _settle_word(self, user_id: int, word_id: int, grade: GradeResult) -> AnswerResult:
        with self._transaction() as session:
            if grade.is_correct:
                self._release(session, user_id, StudyMode.VOCAB, word_id)
                session.execute(
                    update(User)
                    .where(User.id == user_id)
                    .values(
                        points=User.points + VOCAB_POINTS_PER_CORRECT,
                        exercises_done=User.exercises_done + 1,
                    )
                    .execution_options(synchronize_session=False)
                )
                self.leaderboard.award_points(session, user_id, POINTS_PER_CORRECT_ANSWER)

            review = self.scheduler.record_review(session, word_id, user_id, grade.is_correct)

            state = SessionState(
                mode=StudyMode.VOCAB,
                word_id=None if grade.is_correct else word_id,
            )
            return AnswerResult(
                mode=StudyMode.VOCAB,
                item_id=word_id,
                is_correct=grade.is_correct,
                grade=grade,
                state=state,
                review=review,
            )

    def _release(self, session: Session, user_id: int, mode: StudyMode, item_id: int) -> None:
        """Clear the outstanding item only if it is still the one that was graded."""
        if mode is StudyMode.EXERCISE:
            still_outstanding = User.current_exercise_id == item_id
            values = {"current_exercise_id": None}
        else:
            still_outstanding = User.current_word_id == item_id
            values = {"current_word_id": None}

        result = session.execute(
            update(User)
            .where(User.id == user_id, User.current_mode == mode.value, still_outstanding)
            .values({**values, "updated_at": self._clock()})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"User id={user_id}: {mode.value} {item_id} was already settled")
            raise NoOutstandingItemError(f"{mode.value} {item_id} is no longer outstanding")

    def reveal_answer(self, external_id: int) -> RevealedWord:
        """
        Give up on the outstanding word: record a failed review, keep the word.

        Raises:
            NoOutstandingItemError: no word is outstanding
        """
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            word_id = SessionState.from_user(user).require_outstanding(StudyMode.VOCAB)
            word = self.content.get_word_by_id(session, word_id)
            review = self.scheduler.record_review(session, word_id, user.id, is_correct=False)

        logger.info(f"User {external_id}: revealed word {word_id}")
        return RevealedWord(word=word, review=review)

    # =========================================================================
    # Resets
    # =========================================================================

    def reset(self, external_id: int) -> SessionState:
        """Drop any outstanding item. Review and submission history are kept."""
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            self._clear(session, user)
        logger.info(f"User {external_id}: reset")
        return SessionState(mode=StudyMode.EXERCISE)

    def change_level(self, external_id: int, level: Level | str) -> Level:
        """
        Move the learner to ``level`` and drop any outstanding item.

        Raises:
            InvalidLevelError: ``level`` is not a known level
        """
        new_level = Level.parse(level)
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            self._clear(session, user, level=new_level.value)
        logger.info(f"User {external_id}: level set to {new_level.value}")
        return new_level

    def _clear(self, session: Session, user: User, **extra: object) -> None:
        session.execute(
            update(User)
            .where(User.id == user.id)
            .values(
                current_exercise_id=None,
                current_word_id=None,
                current_mode=StudyMode.EXERCISE.value,
                updated_at=self._clock(),
                **extra,
            )
            .execution_options(synchronize_session=False)
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def count_unsolved_exercises(self, external_id: int) -> int:
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            return self.selector.count_unsolved(session, user.id, user.level)

    def count_due_words(self, external_id: int) -> int:
        with self._transaction() as session:
            user = self.users.get(session, external_id)
            return self.scheduler.count_due_words(session, user.id, user.level)

    def get_leaderboard(self, period_type: PeriodType | str, limit: int) -> list[LeaderboardEntry]:
        with self._transaction() as session:
            return self.leaderboard.get_leaderboard(session, period_type, limit)

    def get_leaderboards(self, limit: int) -> dict[str, list[LeaderboardEntry]]:
        with self._transaction() as session:
            return self.leaderboard.get_leaderboards(session, limit)


def build_progress_tracker(grader: Grader, settings: Settings | None = None, **overrides) -> ProgressTracker:
    """Wire a tracker from settings; keyword overrides replace individual collaborators."""
    settings = settings or get_settings()
    components = {
        "session_factory": None,
        "leaderboard": LeaderboardAggregator(timezone=settings.leaderboard_timezone),
        "users": UserDirectory(
            avatar_base_url=settings.avatar_base_url,
            avatar_count=settings.avatar_count,
        ),
        "exercise_kinds": settings.get_exercise_kinds(),
    }
    components.update(overrides)
    return ProgressTracker(grader, **components)
