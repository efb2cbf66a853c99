"""
Integration tests for LeaderboardAggregator.
"""

import threading
from datetime import datetime

import pytest

from kotoba.core.enums import PeriodType
from kotoba.core.exceptions import InvalidLimitError
from kotoba.db.database import session_scope
from kotoba.db.models import UserRanking
from kotoba.leaderboard.aggregator import LeaderboardAggregator
from kotoba.study.users import UserDirectory


@pytest.fixture
def aggregator(clock):
    return LeaderboardAggregator(clock=clock)


@pytest.fixture
def make_user(session_factory):
    directory = UserDirectory(avatar_base_url=None)

    def _make(external_id: int, username: str | None) -> int:
        with session_scope(session_factory) as session:
            return directory.ensure_user(session, external_id, username=username).id

    return _make


def award(session_factory, aggregator, user_id, times=1):
    for _ in range(times):
        with session_scope(session_factory) as session:
            aggregator.award_points(session, user_id)


class TestAwardPoints:
    def test_updates_every_period(self, session_factory, aggregator, make_user):
        user_id = make_user(1, "aki")
        award(session_factory, aggregator, user_id, times=3)

        with session_scope(session_factory) as session:
            for period in PeriodType:
                assert aggregator.get_score(session, user_id, period) == 3
            assert session.query(UserRanking).filter_by(user_id=user_id).count() == 3

    def test_new_day_starts_new_daily_row(self, session_factory, aggregator, make_user, clock):
        user_id = make_user(1, "aki")
        award(session_factory, aggregator, user_id)
        clock.advance(days=1)
        award(session_factory, aggregator, user_id)

        with session_scope(session_factory) as session:
            assert aggregator.get_score(session, user_id, PeriodType.DAILY) == 1
            assert aggregator.get_score(session, user_id, PeriodType.WEEKLY) == 2
            assert aggregator.get_score(session, user_id, PeriodType.MONTHLY) == 2

    def test_stored_window_bounds(self, session_factory, aggregator, make_user):
        user_id = make_user(1, "aki")
        award(session_factory, aggregator, user_id)

        with session_scope(session_factory) as session:
            weekly = session.query(UserRanking).filter_by(period_type="weekly").one()
            assert weekly.period_start == datetime(2024, 5, 13, 0, 0, 0)
            assert weekly.period_end == datetime(2024, 5, 19, 23, 59, 59)

    def test_interleaved_awards_sum(self, session_factory, aggregator, make_user):
        a = make_user(1, "aki")
        b = make_user(2, "ben")
        for user_id in [a, b, a, a, b]:
            award(session_factory, aggregator, user_id)

        with session_scope(session_factory) as session:
            assert aggregator.get_score(session, a, "daily") == 3
            assert aggregator.get_score(session, b, "daily") == 2

    def test_concurrent_awards_are_not_lost(self, session_factory, aggregator, make_user):
        user_id = make_user(1, "aki")
        workers = 6
        barrier = threading.Barrier(workers)
        errors: list[BaseException] = []

        def worker():
            barrier.wait()
            try:
                award(session_factory, aggregator, user_id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with session_scope(session_factory) as session:
            for period in PeriodType:
                assert aggregator.get_score(session, user_id, period) == workers
            assert session.query(UserRanking).filter_by(user_id=user_id).count() == 3


class TestGetLeaderboard:
    def test_competition_ranking(self, session_factory, aggregator, make_user):
        first = make_user(1, "aki")
        second = make_user(2, "ben")
        third = make_user(3, "chie")
        award(session_factory, aggregator, first, times=50)
        award(session_factory, aggregator, second, times=50)
        award(session_factory, aggregator, third, times=30)

        with session_scope(session_factory) as session:
            board = aggregator.get_leaderboard(session, PeriodType.MONTHLY, limit=10)

        assert [(e.username, e.score, e.rank) for e in board] == [
            ("aki", 50, 1),
            ("ben", 50, 1),
            ("chie", 30, 3),
        ]

    def test_users_without_username_hidden(self, session_factory, aggregator, make_user):
        award(session_factory, aggregator, make_user(1, None), times=5)
        award(session_factory, aggregator, make_user(2, "ben"))

        with session_scope(session_factory) as session:
            board = aggregator.get_leaderboard(session, "daily", limit=10)
        assert [e.username for e in board] == ["ben"]
        assert board[0].rank == 1

    def test_limit(self, session_factory, aggregator, make_user):
        for n in range(5):
            award(session_factory, aggregator, make_user(n, f"user{n}"), times=n + 1)

        with session_scope(session_factory) as session:
            board = aggregator.get_leaderboard(session, "weekly", limit=2)
        assert [e.username for e in board] == ["user4", "user3"]

    def test_limit_must_be_positive(self, session_factory, aggregator):
        with session_scope(session_factory) as session:
            with pytest.raises(InvalidLimitError):
                aggregator.get_leaderboard(session, "daily", limit=0)

    def test_previous_period_not_included(self, session_factory, aggregator, make_user, clock):
        award(session_factory, aggregator, make_user(1, "aki"))
        clock.advance(days=7)

        with session_scope(session_factory) as session:
            assert aggregator.get_leaderboard(session, "weekly", limit=10) == []
            assert aggregator.get_leaderboards(session, limit=10)["monthly"] != []

    def test_entry_to_dict(self, session_factory, aggregator, make_user):
        award(session_factory, aggregator, make_user(1, "aki"))
        with session_scope(session_factory) as session:
            [entry] = aggregator.get_leaderboard(session, "daily", limit=1)
        assert entry.to_dict()["username"] == "aki"
        assert set(entry.to_dict()) == {
            "user_id", "username", "first_name", "last_name", "avatar_url", "level", "score", "rank",
        }

    def test_invalid_limit_is_a_value_error(self, session_factory, aggregator):
        with session_scope(session_factory) as session:
            with pytest.raises(ValueError):
                aggregator.get_leaderboard(session, "weekly", limit=-3)
