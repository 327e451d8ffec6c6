"""Shared fixtures: in-memory store, repository and API clients."""

import os
from datetime import date, time

# Settings are read at import time; point the app at SQLite before importing it
os.environ.setdefault("TJ_DATABASE_URL", "sqlite://")
os.environ.setdefault("TJ_JWT_SECRET", "test-secret")

import pyotp
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import journal.models  # noqa: F401
from journal.api.deps import get_current_user
from journal.database import get_session
from journal.main import app
from journal.models.user import User
from journal.services.auth import hash_password
from journal.services.repository import TradeRepository

PASSWORD = "correct horse battery staple"


@pytest.fixture()
def password():
    return PASSWORD


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


def _add_user(session: Session, username: str, totp_secret: str | None = None) -> User:
    user = User(username=username, hashed_password=hash_password(PASSWORD), totp_secret=totp_secret)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def user(session):
    return _add_user(session, "trader")


@pytest.fixture()
def other_user(session):
    return _add_user(session, "someone-else")


@pytest.fixture()
def totp_user(session):
    return _add_user(session, "guarded", totp_secret=pyotp.random_base32())


@pytest.fixture()
def repo(session):
    return TradeRepository(session)


@pytest.fixture()
def anon_client(session):
    """Client with the real auth dependency, backed by the test session."""
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def client(anon_client, user):
    """Client already authenticated as ``user``."""
    app.dependency_overrides[get_current_user] = lambda: user
    return anon_client


@pytest.fixture()
def trade_payload():
    return {
        "trade_date": date(2024, 3, 1),
        "trade_time": time(14, 30),
        "coin": "BTC",
        "entry_order_type": "limit",
        "avg_entry": 62000.0,
        "stop_loss": 61000.0,
        "avg_exit": 64000.0,
        "risk": 50.0,
        "expected_loss": 50.0,
        "realised_win": 100.0,
        "deviation": 0.0,
        "rules": "followed plan",
        "system_number": "S1",
        "notes": "breakout retest",
    }
