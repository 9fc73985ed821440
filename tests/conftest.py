"""Shared fixtures: in-memory SQLite store patched into sociate.db, a fake clock and a client."""

import itertools
import os

# Keep module-level engine creation off the production default.
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sociate import db as db_module
from sociate import timeutil
from sociate.db import get_session
from sociate.models import Base, User

START_MS = 1_700_000_000_000


@pytest.fixture
def engine():
    """Create in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture(autouse=True)
def session_factory(engine, monkeypatch):
    """Point every get_session() at the test engine."""
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    monkeypatch.setattr(db_module, "SessionLocal", factory)
    return factory


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    """Deterministic clock: every now_ms() call is one second after the previous one."""
    ticks = itertools.count(START_MS, 1000)
    monkeypatch.setattr(timeutil, "now_ms", lambda: next(ticks))
    return ticks


@pytest.fixture
def db():
    with get_session() as session:
        yield session


@pytest.fixture
def client():
    from sociate.main import app

    return TestClient(app)


def make_user(db, user_id, username=None, name=None, nickname=None, avatar=None):
    """Insert a user row directly."""
    user = User(
        id=user_id,
        username=username or user_id,
        name=name or user_id.title(),
        email=f"{user_id}@example.com",
        nickname=nickname,
        profile_picture=avatar,
        created_at=START_MS,
    )
    db.add(user)
    db.flush()
    return user


def sync_payload(user_id, username=None, **extra):
    payload = {
        "id": user_id,
        "username": username or user_id,
        "name": (username or user_id).title(),
        "email": f"{user_id}@example.com",
    }
    payload.update(extra)
    return payload
