"""
Leaderboard Aggregator.

Keeps a rolling score per user for the current day, week and month, and
produces ranked snapshots of a period. Scores accumulate with a single
INSERT ... ON CONFLICT DO UPDATE per period, so concurrent awards never
lose an increment.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from functools import partial

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from kotoba.core.clock import Clock
from kotoba.core.enums import PeriodType
from kotoba.core.exceptions import InvalidLimitError
from kotoba.db.database import dialect_insert
from kotoba.db.models import User, UserRanking
from kotoba.leaderboard.periods import current_windows, period_window, reference_now

POINTS_PER_CORRECT_ANSWER = 1


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: int
    username: str
    first_name: str | None
    last_name: str | None
    avatar_url: str | None
    level: str
    score: int
    rank: int

    def to_dict(self) -> dict:
        return asdict(self)


def competition_ranks(scores: Sequence[int]) -> list[int]:
    """
    Standard competition ranking for scores sorted descending.

    Ties share a rank and the following rank skips: [50, 50, 30] -> [1, 1, 3].
    """
    ranks: list[int] = []
    for position, score in enumerate(scores, start=1):
        if ranks and score == scores[position - 2]:
            ranks.append(ranks[-1])
        else:
            ranks.append(position)
    return ranks


class LeaderboardAggregator:
    """Per-period score totals and ranked snapshots."""

    def __init__(self, timezone: str = "UTC", clock: Clock | None = None):
        self.timezone = timezone
        self._clock = clock or partial(reference_now, timezone)

    def award_points(
        self, session: Session, user_id: int, amount: int = POINTS_PER_CORRECT_ANSWER
    ) -> None:
        """Add ``amount`` to the user's daily, weekly and monthly totals."""
        insert = dialect_insert(session)
        now = self._clock()

        for window in current_windows(now):
            stmt = insert(UserRanking).values(
                user_id=user_id,
                score=amount,
                period_start=window.start,
                period_end=window.end,
                period_type=window.period_type.value,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "period_start", "period_end", "period_type"],
                set_={"score": UserRanking.score + stmt.excluded.score},
            )
            session.execute(stmt)

        logger.debug(f"Awarded {amount} point(s) to user {user_id}")

    def get_score(self, session: Session, user_id: int, period_type: PeriodType | str) -> int:
        """User's score in the current window of ``period_type`` (0 if none)."""
        window = period_window(period_type, self._clock())
        score = session.scalar(
            select(UserRanking.score).where(
                UserRanking.user_id == user_id,
                UserRanking.period_type == window.period_type.value,
                UserRanking.period_start == window.start,
                UserRanking.period_end == window.end,
            )
        )
        return score or 0

    def get_leaderboard(
        self, session: Session, period_type: PeriodType | str, limit: int
    ) -> list[LeaderboardEntry]:
        """
        Ranked entries for the current window of ``period_type``.

        Only users with a public identity (username) are listed.
        """
        if limit < 1:
            raise InvalidLimitError(f"limit must be >= 1, got {limit}")

        window = period_window(period_type, self._clock())
        rows = session.execute(
            select(
                User.id,
                User.username,
                User.first_name,
                User.last_name,
                User.avatar_url,
                User.level,
                UserRanking.score,
            )
            .join(User, User.id == UserRanking.user_id)
            .where(
                UserRanking.period_type == window.period_type.value,
                UserRanking.period_start == window.start,
                UserRanking.period_end == window.end,
                User.username.is_not(None),
            )
            .order_by(UserRanking.score.desc(), User.id.asc())
            .limit(limit)
        ).all()

        ranks = competition_ranks([row.score for row in rows])
        return [
            LeaderboardEntry(
                user_id=row.id,
                username=row.username,
                first_name=row.first_name,
                last_name=row.last_name,
                avatar_url=row.avatar_url,
                level=row.level,
                score=row.score,
                rank=rank,
            )
            for row, rank in zip(rows, ranks)
        ]

    def get_leaderboards(self, session: Session, limit: int) -> dict[str, list[LeaderboardEntry]]:
        """Daily, weekly and monthly snapshots keyed by period name."""
        return {
            period_type.value: self.get_leaderboard(session, period_type, limit)
            for period_type in PeriodType
        }
