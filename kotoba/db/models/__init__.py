# SQLAlchemy models
from .base import Base
from .content import Exercise, Word
from .learner import Submission, User, WordReview
from .ranking import UserRanking

__all__ = [
    # Base
    "Base",
    # Content Store
    "Exercise",
    "Word",
    # Learners
    "User",
    "WordReview",
    "Submission",
    # Leaderboard
    "UserRanking",
]
