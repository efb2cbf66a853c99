"""
FastAPI application for the kotoba engine.

Provides REST API for:
- Health checks
- Daily, weekly and monthly leaderboards
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from kotoba import __version__
from kotoba.core.clock import utcnow
from kotoba.core.exceptions import InvalidLevelError, InvalidLimitError, StorageFailure
from kotoba.core.log import configure_logging
from kotoba.db.database import check_database_health, init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting kotoba API...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    logger.info("Shutting down kotoba API...")


app = FastAPI(
    title="Kotoba",
    description="Leaderboards and health for the kotoba Japanese study engine.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Error Handlers
# ========================================


@app.exception_handler(StorageFailure)
@app.exception_handler(SQLAlchemyError)
async def storage_failure_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Storage failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable"})


@app.exception_handler(InvalidLevelError)
@app.exception_handler(InvalidLimitError)
async def invalid_argument_handler(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "kotoba",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round trip."""
    db_status, db_error = check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": utcnow().isoformat(),
        "components": {"database": db_status},
        "config": settings.get_leaderboard_config(),
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Routers
# ========================================

from kotoba.api.routers import leaderboard_router  # noqa: E402

app.include_router(leaderboard_router.router, prefix="/v1", tags=["Leaderboard"])
