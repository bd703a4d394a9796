"""
Tests for the reading stores.

- ReadingRepository: SQLAlchemy store against an in-memory SQLite database
- MemoryReadingRepository: process-local dict store
- SupabaseReadingRepository: hosted table store, driven through a fake
  query builder that records the calls it receives
- ReadingMapper: conversion between Reading models and hosted rows
"""

import pytest
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from test_fixtures import db_session
from adapters import supabase_adapter
from app.exceptions import ExternalServiceError
from domain.enums import MealType, ActivityLevel
from domain.mappers import ReadingMapper
from domain.models import Reading
from repositories import (
    ReadingRepository,
    MemoryReadingRepository,
    SupabaseReadingRepository,
)

USER = uuid.uuid4()
T0 = datetime(2024, 5, 13, 8, 0, tzinfo=timezone.utc)


def _fields(blood_sugar=110.0, hours=0, meal_type=MealType.BREAKFAST, **extra):
    fields = {
        "blood_sugar": blood_sugar,
        "meal_type": meal_type,
        "carbs": 30,
        "activity_level": ActivityLevel.MODERATE,
        "timestamp": T0 + timedelta(hours=hours),
        "notes": None,
        "photo_url": None,
    }
    fields.update(extra)
    return fields


# =============================================================================
# SQL REPOSITORY
# =============================================================================


def test_sql_create_and_get(db_session: Session):
    repo = ReadingRepository(db_session)
    created = repo.create_reading(USER, _fields(126.5, notes="toast"))
    assert created.id is not None

    fetched = repo.get_reading(USER, created.id)
    assert fetched.blood_sugar == 126.5
    assert fetched.meal_type == MealType.BREAKFAST
    assert fetched.activity_level == ActivityLevel.MODERATE
    assert fetched.notes == "toast"
    assert fetched.timestamp == T0
    assert fetched.timestamp.tzinfo is not None


def test_sql_timestamp_defaults_to_now(db_session: Session):
    repo = ReadingRepository(db_session)
    created = repo.create_reading(USER, _fields(timestamp=None))
    assert abs(created.timestamp - datetime.now(timezone.utc)) < timedelta(minutes=1)


def test_sql_list_is_newest_first_and_user_scoped(db_session: Session):
    repo = ReadingRepository(db_session)
    for hours, value in ((0, 90), (5, 130), (2, 110)):
        repo.create_reading(USER, _fields(value, hours=hours))
    repo.create_reading(uuid.uuid4(), _fields(200))

    readings = repo.list_readings(USER)
    assert [r.blood_sugar for r in readings] == [130, 110, 90]


def test_sql_update_and_delete(db_session: Session):
    repo = ReadingRepository(db_session)
    created = repo.create_reading(USER, _fields())

    updated = repo.update_reading(USER, created.id, {"carbs": 55, "meal_type": MealType.LUNCH})
    assert updated.carbs == 55
    assert updated.meal_type == MealType.LUNCH

    assert repo.update_reading(uuid.uuid4(), created.id, {"carbs": 1}) is None
    assert repo.delete_reading(uuid.uuid4(), created.id) is False
    assert repo.delete_reading(USER, created.id) is True
    assert repo.get_reading(USER, created.id) is None


def test_sql_list_by_range_is_inclusive(db_session: Session):
    repo = ReadingRepository(db_session)
    for hours in (0, 1, 2, 3):
        repo.create_reading(USER, _fields(hours=hours))
    found = repo.list_by_range(USER, T0 + timedelta(hours=1), T0 + timedelta(hours=2))
    assert [r.timestamp for r in found] == [T0 + timedelta(hours=2), T0 + timedelta(hours=1)]


def test_sql_check_constraint_rejects_out_of_range(db_session: Session):
    repo = ReadingRepository(db_session)
    with pytest.raises(IntegrityError):
        repo.create_reading(USER, _fields(blood_sugar=20))
    db_session.rollback()


# =============================================================================
# MEMORY REPOSITORY
# =============================================================================


def test_memory_store_crud():
    store = MemoryReadingRepository()
    created = store.create_reading(USER, _fields(100.0))
    assert len(store) == 1
    assert store.get_reading(USER, created.id) is created
    assert store.get_reading(uuid.uuid4(), created.id) is None

    store.update_reading(USER, created.id, {"notes": "felt shaky"})
    assert store.get_reading(USER, created.id).notes == "felt shaky"

    assert store.delete_reading(USER, created.id) is True
    assert store.delete_reading(USER, created.id) is False
    assert len(store) == 0


def test_memory_store_ordering_and_range():
    store = MemoryReadingRepository()
    for hours in (3, 0, 2, 1):
        store.create_reading(USER, _fields(hours=hours))
    ordered = store.list_readings(USER)
    assert [r.timestamp for r in ordered] == sorted((r.timestamp for r in ordered), reverse=True)
    in_range = store.list_by_range(USER, T0 + timedelta(hours=1), T0 + timedelta(hours=2))
    assert len(in_range) == 2
    store.clear()
    assert store.list_readings(USER) == []


# =============================================================================
# SUPABASE REPOSITORY
# =============================================================================


class FakeQuery:
    """Chainable stand-in for the PostgREST query builder"""

    def __init__(self, rows, calls, error=None):
        self.rows = rows
        self.calls = calls
        self.error = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def execute(self):
        if self.error:
            raise self.error
        return type("Response", (), {"data": self.rows})()


def _row(reading_id=None, **overrides):
    row = {
        "id": str(reading_id or uuid.uuid4()),
        "user_id": str(USER),
        "blood_sugar": "132.0",
        "meal": "Lunch",
        "carbs": 60,
        "activity_level": "low",
        "timestamp": "2024-05-13T12:00:00Z",
        "notes": None,
        "photo_url": "https://cdn/meal.jpg",
    }
    row.update(overrides)
    return row


def _install(monkeypatch, rows=None, error=None):
    calls = []
    monkeypatch.setattr(
        supabase_adapter, "table", lambda name: FakeQuery(rows or [], calls, error)
    )
    return calls


def test_supabase_list_maps_rows(monkeypatch):
    calls = _install(monkeypatch, rows=[_row()])
    readings = SupabaseReadingRepository().list_readings(USER)
    assert len(readings) == 1
    reading = readings[0]
    assert reading.meal_type == MealType.LUNCH
    assert reading.blood_sugar == 132.0
    assert reading.timestamp == datetime(2024, 5, 13, 12, tzinfo=timezone.utc)
    assert ("eq", ("user_id", str(USER)), {}) in calls
    assert ("order", ("timestamp",), {"desc": True}) in calls


def test_supabase_create_sends_hosted_columns(monkeypatch):
    calls = _install(monkeypatch, rows=[_row()])
    SupabaseReadingRepository().create_reading(USER, _fields(meal_type=MealType.LUNCH))
    name, args, _ = next(c for c in calls if c[0] == "insert")
    row = args[0]
    assert row["meal"] == "lunch"
    assert "meal_type" not in row
    assert row["activity_level"] == "moderate"
    assert row["user_id"] == str(USER)
    assert row["timestamp"] == T0.isoformat()


def test_supabase_get_missing_returns_none(monkeypatch):
    _install(monkeypatch, rows=[])
    assert SupabaseReadingRepository().get_reading(USER, uuid.uuid4()) is None
    assert SupabaseReadingRepository().delete_reading(USER, uuid.uuid4()) is False


def test_supabase_range_filters(monkeypatch):
    calls = _install(monkeypatch, rows=[])
    SupabaseReadingRepository().list_by_range(USER, T0, T0 + timedelta(days=1))
    assert ("gte", ("timestamp", T0.isoformat()), {}) in calls
    assert ("lte", ("timestamp", (T0 + timedelta(days=1)).isoformat()), {}) in calls


def test_supabase_errors_are_wrapped(monkeypatch):
    _install(monkeypatch, error=RuntimeError("connection reset"))
    with pytest.raises(ExternalServiceError):
        SupabaseReadingRepository().list_readings(USER)


def test_supabase_unconfigured_raises(monkeypatch):
    monkeypatch.setattr(supabase_adapter, "_client", None)
    with pytest.raises(ExternalServiceError) as exc_info:
        SupabaseReadingRepository().list_readings(USER)
    assert exc_info.value.code == "BACKEND_UNAVAILABLE"


# =============================================================================
# MAPPER
# =============================================================================


def test_mapper_partial_update_row():
    row = ReadingMapper.to_row({"meal_type": MealType.DINNER, "notes": None, "unknown": 1})
    assert row == {"meal": "dinner", "notes": None}


def test_mapper_from_row_builds_transient_reading():
    reading = ReadingMapper.from_row(_row(timestamp="2024-05-13T12:00:00"))
    assert isinstance(reading, Reading)
    assert reading.timestamp.tzinfo is not None
    assert reading.photo_url == "https://cdn/meal.jpg"
