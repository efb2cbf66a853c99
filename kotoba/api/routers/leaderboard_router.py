"""
Leaderboard router.

Read-only ranked snapshots for the web client.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.orm import Session

from config import get_settings
from kotoba.core.enums import PeriodType
from kotoba.db.database import get_session
from kotoba.leaderboard.aggregator import LeaderboardAggregator, LeaderboardEntry

router = APIRouter()


# ========================================
# Response Models
# ========================================


class LeaderboardEntryResponse(BaseModel):
    """One ranked learner."""

    user_id: int
    username: str
    first_name: str | None
    last_name: str | None
    avatar_url: str | None
    level: str
    score: int
    rank: int

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> LeaderboardEntryResponse:
        return cls(**entry.to_dict())


class LeaderboardsResponse(BaseModel):
    """Current daily, weekly and monthly leaderboards."""

    daily: list[LeaderboardEntryResponse]
    weekly: list[LeaderboardEntryResponse]
    monthly: list[LeaderboardEntryResponse]


class PeriodLeaderboardResponse(BaseModel):
    period_type: PeriodType
    entries: list[LeaderboardEntryResponse]


# ========================================
# Dependencies
# ========================================


def get_aggregator() -> LeaderboardAggregator:
    return LeaderboardAggregator(timezone=get_settings().leaderboard_timezone)


def _default_limit() -> int:
    return get_settings().leaderboard_default_limit


# ========================================
# Endpoints
# ========================================


@router.get("/leaderboard", response_model=LeaderboardsResponse, summary="All leaderboards")
def get_leaderboards(
    limit: int | None = Query(default=None, ge=1, le=1000),
    session: Session = Depends(get_session),
    aggregator: LeaderboardAggregator = Depends(get_aggregator),
) -> LeaderboardsResponse:
    """Top ``limit`` learners for the current day, week and month."""
    limit = limit or _default_limit()
    logger.info(f"Fetching leaderboards (limit={limit})")

    boards = aggregator.get_leaderboards(session, limit)
    return LeaderboardsResponse(
        **{
            period: [LeaderboardEntryResponse.from_entry(e) for e in entries]
            for period, entries in boards.items()
        }
    )


@router.get(
    "/leaderboard/{period_type}",
    response_model=PeriodLeaderboardResponse,
    summary="Leaderboard for one period",
)
def get_period_leaderboard(
    period_type: PeriodType,
    limit: int | None = Query(default=None, ge=1, le=1000),
    session: Session = Depends(get_session),
    aggregator: LeaderboardAggregator = Depends(get_aggregator),
) -> PeriodLeaderboardResponse:
    limit = limit or _default_limit()
    entries = aggregator.get_leaderboard(session, period_type, limit)
    return PeriodLeaderboardResponse(
        period_type=period_type,
        entries=[LeaderboardEntryResponse.from_entry(e) for e in entries],
    )
