"""
Study flow: exercise selection, vocabulary scheduling and learner session state.
"""

from kotoba.study.grading import CORRECT_SCORE_THRESHOLD, Grader, GradeResult
from kotoba.study.progress import AnswerResult, ProgressTracker, RevealedWord, build_progress_tracker
from kotoba.study.scheduler import (
    DEFAULT_INTERVAL_POLICY,
    IntervalPolicy,
    ReviewOutcome,
    SpacedRepetitionScheduler,
)
from kotoba.study.selector import GRAMMAR_MAX_EXPOSURES, ExerciseSelector
from kotoba.study.session_state import SessionState
from kotoba.study.users import UserDirectory

__all__ = [
    "CORRECT_SCORE_THRESHOLD",
    "DEFAULT_INTERVAL_POLICY",
    "GRAMMAR_MAX_EXPOSURES",
    "AnswerResult",
    "ExerciseSelector",
    "GradeResult",
    "Grader",
    "IntervalPolicy",
    "ProgressTracker",
    "ReviewOutcome",
    "RevealedWord",
    "SessionState",
    "SpacedRepetitionScheduler",
    "UserDirectory",
    "build_progress_tracker",
]
