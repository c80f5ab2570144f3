import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.clock import get_clock
from app.core.database import Base, get_db
from app.main import app
from app.models.match import Match, MatchStatus
from app.models.user import User

NOW = datetime(2025, 8, 10, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make(username: str, email: str = None) -> User:
        user = User(username=username, email=email or f"{username.lower()}@example.com")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_match(db):
    counter = {"n": 0}

    def _make(
        kickoff: datetime = NOW + timedelta(days=1),
        status: MatchStatus = MatchStatus.SCHEDULED,
        home_team: str = "Arsenal",
        away_team: str = "Chelsea",
    ) -> Match:
        counter["n"] += 1
        match = Match(
            external_id=f"fixture-{counter['n']}",
            home_team=home_team,
            away_team=away_team,
            competition="Premier League",
            kickoff=kickoff,
            status=status,
        )
        db.add(match)
        db.commit()
        db.refresh(match)
        return match
    return _make


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
