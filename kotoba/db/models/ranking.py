from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from kotoba.core.clock import utcnow

from .base import Base


class UserRanking(Base):
    """
    Accumulated score for one user in one leaderboard period.

    Rows are upserted with accumulate semantics; there is one row per
    (user, period window, period type).
    """

    __tablename__ = "user_rankings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    period_start: Mapped[datetime] = mapped_column(nullable=False)
    period_end: Mapped[datetime] = mapped_column(nullable=False)
    period_type: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "period_start", "period_end", "period_type", name="uq_user_rankings_period"
        ),
        CheckConstraint("period_type IN ('daily', 'weekly', 'monthly')", name="period_type"),
        Index("idx_user_rankings_window", "period_type", "period_start", "period_end"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserRanking user={self.user_id} {self.period_type} "
            f"{self.period_start:%Y-%m-%d} score={self.score}>"
        )
