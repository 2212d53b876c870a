"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "test"
os.environ["TESTING"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EXERCISE_LATENCY_SECONDS"] = "0"

from src.database import Base, get_db
from src.main import app
from src.schemas.insight import Insight

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def engine():
    """Create test database engine."""
    return create_engine(
        os.environ["DATABASE_URL"],
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture(scope="session")
def tables(engine):
    """Create all tables for tests."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine, tables) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = sessionmaker(bind=connection)()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id(client: TestClient) -> int:
    """Create a user through the API and return its id."""
    response = client.post("/api/v1/users/", json={"name": "Ana", "timezone": "UTC"})
    return response.json()["id"]


@pytest.fixture
def make_insight() -> Callable[..., Insight]:
    """Build insights with sensible defaults relative to ``NOW``."""
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Insight:
        created = overrides.pop("timestamp", NOW - timedelta(days=2))
        fields = {
            "id": f"insight-{next(counter)}",
            "content": "A prática deliberada exige foco total e feedback imediato.",
            "timestamp": created,
            "review_stage": 0,
            "next_review": created + timedelta(days=1),
            "review_history": [{"timestamp": created, "action": "created"}],
        }
        fields.update(overrides)
        return Insight.model_validate(fields)

    return _make


def export_record(insight: Insight) -> dict[str, Any]:
    """Serialize an insight the way export files store it."""
    return insight.model_dump(mode="json", by_alias=True)
