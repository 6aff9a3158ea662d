# tests/conftest.py
"""Shared fixtures: every test gets its own in-memory SQLite store."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("API_KEY", "")

import pytest
from sqlalchemy.orm import sessionmaker

from labtrack.database import build_engine
from labtrack.services.schema_service import ensure_schema
from labtrack.services.user_service import register_user


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Provisioned session: tables, indexes and the bootstrap admin exist."""
    session = session_factory()
    ensure_schema(session)
    yield session
    session.close()


@pytest.fixture
def alice(db):
    return register_user(db, 123456, "Alice", "Smith")


@pytest.fixture
def make_user(db):
    def _make(student_id, first="Test", last="User", tags=0):
        return register_user(db, student_id, first, last, tags)
    return _make
