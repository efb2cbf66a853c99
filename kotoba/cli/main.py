"""
Typer CLI for the kotoba engine.

Commands:
    kotoba db init              - Initialize database tables
    kotoba leaderboard          - Show daily, weekly and monthly leaderboards
    kotoba leaderboard weekly   - Show one period
    kotoba users count          - Number of registered learners
    kotoba users list           - Newest learners first
    kotoba content stats        - Exercise and word counts per level
    kotoba serve                - Run the HTTP API
    kotoba version              - Print the version

Usage:
    kotoba --help
    kotoba leaderboard monthly --limit 10
"""

from __future__ import annotations

from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from kotoba import __version__
from kotoba.content.store import ContentStore
from kotoba.core.enums import Level, PeriodType
from kotoba.core.exceptions import StorageFailure
from kotoba.core.log import configure_logging
from kotoba.db.database import init_db, session_scope
from kotoba.db.models import Exercise, Word
from kotoba.leaderboard.aggregator import LeaderboardAggregator, LeaderboardEntry
from kotoba.study.users import UserDirectory

app = typer.Typer(
    help="kotoba CLI: Japanese study engine administration",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


# ========================================
# Database Commands
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    logger.info("Initializing database tables...")
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise typer.Exit(code=1)
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# Leaderboard
# ========================================


def _leaderboard_table(title: str, entries: list[LeaderboardEntry]) -> Table:
    table = Table(title=title)
    table.add_column("Rank", justify="right", style="cyan")
    table.add_column("User")
    table.add_column("Level")
    table.add_column("Score", justify="right", style="green")
    for entry in entries:
        table.add_row(str(entry.rank), f"@{entry.username}", entry.level, str(entry.score))
    return table


@app.command("leaderboard")
def leaderboard(
    period: Optional[PeriodType] = typer.Argument(None, help="daily, weekly or monthly"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Entries per board"),
) -> None:
    """Show the current leaderboards."""
    settings = get_settings()
    limit = limit or settings.leaderboard_default_limit
    aggregator = LeaderboardAggregator(timezone=settings.leaderboard_timezone)
    periods = [period] if period else list(PeriodType)

    try:
        with session_scope() as session:
            boards = {p: aggregator.get_leaderboard(session, p, limit) for p in periods}
    except StorageFailure as e:
        rprint(f"[red]Storage unavailable:[/red] {e}")
        raise typer.Exit(code=1)

    for p, entries in boards.items():
        if not entries:
            rprint(f"[dim]No {p.value} scores yet[/dim]")
            continue
        console.print(_leaderboard_table(f"{p.value.capitalize()} leaderboard", entries))


# ========================================
# Users
# ========================================

users_app = typer.Typer(help="Learner accounts")
app.add_typer(users_app, name="users")


@users_app.command("count")
def users_count() -> None:
    """Number of registered learners."""
    with session_scope() as session:
        total = UserDirectory().count_users(session)
    rprint(f"[bold]{total}[/bold] users")


@users_app.command("list")
def users_list(
    limit: int = typer.Option(20, "--limit", "-n", min=1),
    offset: int = typer.Option(0, "--offset", min=0),
) -> None:
    """Newest learners first."""
    with session_scope() as session:
        users = UserDirectory().list_users(session, limit=limit, offset=offset)

    table = Table(title="Users")
    table.add_column("Telegram ID", justify="right")
    table.add_column("Username")
    table.add_column("Level")
    table.add_column("Points", justify="right")
    table.add_column("Mode")
    for user in users:
        table.add_row(
            str(user.telegram_id),
            user.username or "-",
            user.level,
            f"{user.points:g}",
            user.current_mode,
        )
    console.print(table)


# ========================================
# Content
# ========================================

content_app = typer.Typer(help="Exercise and vocabulary content")
app.add_typer(content_app, name="content")


@content_app.command("stats")
def content_stats() -> None:
    """Exercise and word counts per level."""
    with session_scope() as session:
        totals = ContentStore().content_counts(session)
        exercises = dict(session.execute(select(Exercise.level, func.count()).group_by(Exercise.level)).all())
        words = dict(session.execute(select(Word.level, func.count()).group_by(Word.level)).all())

    table = Table(title="Content")
    table.add_column("Level")
    table.add_column("Exercises", justify="right")
    table.add_column("Words", justify="right")
    for level in Level:
        table.add_row(level.value, str(exercises.get(level.value, 0)), str(words.get(level.value, 0)))
    table.add_row("[bold]Total[/bold]", str(totals["exercises"]), str(totals["words"]))
    console.print(table)


# ========================================
# Server / Meta
# ========================================


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("kotoba.api.main:app", host=host or settings.api_host, port=port or settings.api_port)


@app.command("version")
def version() -> None:
    """Print the engine version."""
    rprint(f"kotoba {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
