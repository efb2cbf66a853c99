"""
Unit tests for leaderboard period windows and competition ranking.
"""

from datetime import datetime

import pytest

from kotoba.core.enums import PeriodType
from kotoba.leaderboard.aggregator import competition_ranks
from kotoba.leaderboard.periods import current_windows, period_window


class TestPeriodWindow:
    def test_daily_window(self):
        window = period_window(PeriodType.DAILY, datetime(2024, 5, 15, 13, 45))
        assert window.start == datetime(2024, 5, 15, 0, 0, 0)
        assert window.end == datetime(2024, 5, 15, 23, 59, 59)

    def test_weekly_window_starts_monday(self):
        # 2024-05-15 is a Wednesday
        window = period_window("weekly", datetime(2024, 5, 15, 8, 0))
        assert window.start == datetime(2024, 5, 13, 0, 0, 0)
        assert window.end == datetime(2024, 5, 19, 23, 59, 59)

    def test_weekly_window_on_sunday(self):
        window = period_window(PeriodType.WEEKLY, datetime(2024, 5, 19, 23, 0))
        assert window.start == datetime(2024, 5, 13)

    def test_weekly_window_crosses_month(self):
        window = period_window(PeriodType.WEEKLY, datetime(2024, 6, 1, 10, 0))
        assert window.start == datetime(2024, 5, 27)
        assert window.end == datetime(2024, 6, 2, 23, 59, 59)

    def test_monthly_window_leap_february(self):
        window = period_window(PeriodType.MONTHLY, datetime(2024, 2, 10))
        assert window.start == datetime(2024, 2, 1)
        assert window.end == datetime(2024, 2, 29, 23, 59, 59)

    def test_monthly_window_december(self):
        window = period_window(PeriodType.MONTHLY, datetime(2023, 12, 31, 23, 59))
        assert window.end == datetime(2023, 12, 31, 23, 59, 59)

    def test_contains(self):
        window = period_window(PeriodType.DAILY, datetime(2024, 5, 15, 12))
        assert window.contains(datetime(2024, 5, 15, 23, 59, 59))
        assert not window.contains(datetime(2024, 5, 16, 0, 0, 0))

    def test_unknown_period_rejected(self):
        with pytest.raises(ValueError):
            period_window("yearly", datetime(2024, 5, 15))

    def test_current_windows_cover_all_periods(self):
        windows = current_windows(datetime(2024, 5, 15, 12))
        assert [w.period_type for w in windows] == list(PeriodType)
        assert all(w.contains(datetime(2024, 5, 15, 12)) for w in windows)


class TestCompetitionRanks:
    def test_ties_share_rank_and_skip(self):
        assert competition_ranks([50, 50, 30]) == [1, 1, 3]

    def test_distinct_scores(self):
        assert competition_ranks([9, 5, 2]) == [1, 2, 3]

    def test_tie_in_middle(self):
        assert competition_ranks([10, 7, 7, 7, 1]) == [1, 2, 2, 2, 5]

    def test_empty(self):
        assert competition_ranks([]) == []
