"""
kotoba: learning-progression engine for a Japanese study bot.

Subpackages:
- core: enums, error taxonomy, clocks
- db: SQLAlchemy models and session management
- content: exercise/word payloads and the read-mostly content store
- study: exercise selection, spaced repetition, the per-user state machine
- leaderboard: period windows and ranked snapshots
- api / cli: thin transport surfaces
"""

__version__ = "1.0.0"
