"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from kotoba.content.payloads import (  # noqa: E402
    AudioContent,
    GrammarContent,
    QuestionContent,
    TranslationContent,
    WordEntry,
)
from kotoba.content.store import ContentStore  # noqa: E402
from kotoba.db.database import create_engine_for_url, create_session_factory, init_db, session_scope  # noqa: E402
from kotoba.leaderboard.aggregator import LeaderboardAggregator  # noqa: E402
from kotoba.study.grading import GradeResult  # noqa: E402
from kotoba.study.progress import ProgressTracker  # noqa: E402
from kotoba.study.scheduler import SpacedRepetitionScheduler  # noqa: E402
from kotoba.study.selector import ExerciseSelector  # noqa: E402
from kotoba.study.users import UserDirectory  # noqa: E402

# Wednesday, so the weekly window is Mon 2024-05-13 .. Sun 2024-05-19
FIXED_NOW = datetime(2024, 5, 15, 12, 0, 0)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI and API surfaces")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Test doubles
# ========================================


class FixedClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class ScriptedGrader:
    """Returns queued scores in order, then ``default_score``."""

    def __init__(self, *scores: int, default_score: int = 100):
        self.scores = list(scores)
        self.default_score = default_score
        self.calls: list[tuple[object, str]] = []

    def queue(self, *scores: int) -> None:
        self.scores.extend(scores)

    def score(self, item, user_input: str) -> GradeResult:
        self.calls.append((item, user_input))
        score = self.scores.pop(0) if self.scores else self.default_score
        return GradeResult(score=score, comment=f"score {score}", suggestion="keep going")


# ========================================
# Database
# ========================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate connections see the same data."""
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'kotoba-test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def grader():
    return ScriptedGrader()


@pytest.fixture
def store():
    return ContentStore()


@pytest.fixture
def tracker(session_factory, grader, clock):
    return ProgressTracker(
        grader,
        session_factory=session_factory,
        selector=ExerciseSelector(rng=random.Random(7)),
        scheduler=SpacedRepetitionScheduler(clock=clock, rng=random.Random(7)),
        leaderboard=LeaderboardAggregator(clock=clock),
        users=UserDirectory(avatar_base_url="https://assets.example.test", rng=random.Random(7)),
        clock=clock,
    )


# ========================================
# Content
# ========================================


def sample_exercise(kind: str, n: int = 1):
    if kind == "translation":
        return TranslationContent(japanese=f"これは文{n}です。", translation=f"This is sentence {n}.")
    if kind == "question":
        return QuestionContent(question=f"質問{n}：週末は何をしましたか？")
    if kind == "audio":
        return AudioContent(text=f"駅は右です{n}。", question="駅はどこですか？")
    return GrammarContent(grammar=f"〜てもいい{n}", meaning="may; it is okay to", structure="Vて + もいい")


@pytest.fixture
def seed_exercises(session_factory, store):
    """Insert exercises: ``seed_exercises("N5", ["grammar", "question"])`` returns their ids."""

    def _seed(level: str, kinds: list[str]) -> list[int]:
        contents = [sample_exercise(kind, n) for n, kind in enumerate(kinds, start=1)]
        with session_scope(session_factory) as session:
            return [e.id for e in store.save_exercises_batch(session, level, contents)]

    return _seed


@pytest.fixture
def seed_words(session_factory, store):
    """Insert ``count`` words at ``level`` and return their ids."""

    def _seed(level: str, count: int) -> list[int]:
        entries = [
            WordEntry(kanji=f"漢字{n}", kana=f"かんじ{n}", translation=f"word {n}", level=level)
            for n in range(1, count + 1)
        ]
        with session_scope(session_factory) as session:
            return [w.id for w in store.save_words_batch(session, entries)]

    return _seed


@pytest.fixture
def learner(tracker):
    """A registered learner with a public username."""
    return tracker.ensure_user(1001, username="hana", first_name="Hana")
