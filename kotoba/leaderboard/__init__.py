"""
Leaderboard: period windows and the ranking aggregator.
"""

from kotoba.leaderboard.aggregator import (
    POINTS_PER_CORRECT_ANSWER,
    LeaderboardAggregator,
    LeaderboardEntry,
    competition_ranks,
)
from kotoba.leaderboard.periods import PeriodWindow, current_windows, period_window

__all__ = [
    "POINTS_PER_CORRECT_ANSWER",
    "LeaderboardAggregator",
    "LeaderboardEntry",
    "PeriodWindow",
    "competition_ranks",
    "current_windows",
    "period_window",
]
