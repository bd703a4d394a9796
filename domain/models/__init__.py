"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    init_database,
)
from domain.models.reading import Reading

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "build_engine",
    "init_database",
    # Reading models
    "Reading",
]
