"""Smoke fixtures: point the process-wide engine at a temporary database."""

import pytest

import kotoba.db.database as database


@pytest.fixture
def global_db(engine, session_factory, monkeypatch):
    monkeypatch.setattr(database, "_engine", engine)
    monkeypatch.setattr(database, "_SessionLocal", session_factory)
    return session_factory
