"""API routers for the kotoba engine."""

from kotoba.api.routers import leaderboard_router

__all__ = [
    "leaderboard_router",
]
