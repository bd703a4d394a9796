"""
Shared test fixtures and utilities for the Ander test suite.

This module contains the test client, reading factories and store/database
fixtures that are reused across multiple test files.
"""

import uuid
from types import SimpleNamespace
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

from main import app
from api import dependencies
from api.dependencies import get_reading_store
from app.config import settings
from domain.enums import MealType, ActivityLevel, StorageBackend
from domain.models import Base, build_engine
from repositories import MemoryReadingRepository

# Lifespan is not entered without a context manager, so no provider is contacted
client = TestClient(app)

DEFAULT_USER_ID = settings.default_user_id


# Realistic readings for a gestational diabetes log
REALISTIC_READINGS = {
    "fasted": {"blood_sugar": 88.0, "meal_type": "fasted", "carbs": 0, "activity_level": "low"},
    "breakfast": {"blood_sugar": 126.0, "meal_type": "breakfast", "carbs": 45, "activity_level": "low"},
    "lunch": {"blood_sugar": 132.5, "meal_type": "lunch", "carbs": 60, "activity_level": "moderate"},
    "dinner": {"blood_sugar": 151.0, "meal_type": "dinner", "carbs": 75, "activity_level": "low"},
    "snack": {"blood_sugar": 104.0, "meal_type": "snack", "carbs": 20, "activity_level": "high"},
}


def reading_payload(kind: str = "breakfast", **overrides) -> dict:
    """
    Build a camelCase request body for POST /api/blood-sugar-readings.

    Example:
        >>> reading_payload("lunch", bloodSugar=180)
        {'bloodSugar': 180, 'mealType': 'lunch', 'carbs': 60, 'activityLevel': 'moderate'}
    """
    base = REALISTIC_READINGS[kind]
    payload = {
        "bloodSugar": base["blood_sugar"],
        "mealType": base["meal_type"],
        "carbs": base["carbs"],
        "activityLevel": base["activity_level"],
    }
    payload.update(overrides)
    return payload


def make_reading(
    blood_sugar=110.0,
    meal_type=MealType.BREAKFAST,
    timestamp=None,
    carbs=30,
    activity_level=ActivityLevel.LOW,
    notes=None,
    user_id=None,
    reading_id=None,
):
    """
    Create a mock reading object with the attributes services read.

    Args:
        blood_sugar: mg/dL value. Defaults to 110 (in range).
        meal_type: MealType member. Defaults to breakfast.
        timestamp: aware datetime. Defaults to now (UTC).

    Returns:
        SimpleNamespace: Mock reading, usable wherever a Reading model is expected.
    """
    return SimpleNamespace(
        id=reading_id or uuid.uuid4(),
        user_id=user_id or DEFAULT_USER_ID,
        blood_sugar=blood_sugar,
        meal_type=meal_type,
        carbs=carbs,
        activity_level=activity_level,
        timestamp=timestamp or datetime.now(timezone.utc),
        notes=notes,
        photo_url=None,
    )


def readings_at(start: datetime, values, step=timedelta(hours=1), meal_type=MealType.LUNCH):
    """One reading per value, `step` apart, starting at `start` (oldest first)"""
    return [
        make_reading(blood_sugar=v, meal_type=meal_type, timestamp=start + i * step)
        for i, v in enumerate(values)
    ]


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def memory_store() -> Generator[MemoryReadingRepository, None, None]:
    """
    Fresh in-memory reading store wired into the app for one test.

    Yields:
        MemoryReadingRepository: the store behind every route during the test
    """
    store = MemoryReadingRepository()
    app.dependency_overrides[get_reading_store] = lambda: store
    try:
        yield store
    finally:
        app.dependency_overrides.pop(get_reading_store, None)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a database session for integration tests.

    Each test gets its own in-memory SQLite database with the schema created,
    so tests never see each other's rows.

    Yields:
        Session: SQLAlchemy database session
    """
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, future=True)

    session = SessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def sql_backend(monkeypatch) -> Generator[dict, None, None]:
    """
    Serve the routes from the SQL store on a private in-memory SQLite database.

    The request dependency opens and closes a session per request; the
    yielded dict counts both so tests can check sessions are released.

    Yields:
        dict: {"opened": int, "closed": int}
    """
    counts = {"opened": 0, "closed": 0}

    class CountingSession(Session):
        def close(self):
            counts["closed"] += 1
            super().close()

    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, future=True, class_=CountingSession)

    def session_local():
        counts["opened"] += 1
        return factory()

    monkeypatch.setattr(settings, "storage_backend", StorageBackend.SQL)
    monkeypatch.setattr(dependencies, "SessionLocal", session_local)
    try:
        yield counts
    finally:
        engine.dispose()
