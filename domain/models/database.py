"""
Database configuration and session management.
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings

logger = logging.getLogger("ander.database")

# Create SQLAlchemy Base
Base = declarative_base()


def build_engine(url: str, echo: bool = False):
    """Create an engine, with the thread and pooling options SQLite needs under FastAPI"""
    kwargs = {"echo": echo, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


# Create engine
engine = build_engine(settings.database_url, echo=settings.db_echo)

# Create session factory
SessionLocal = sessionmaker(bind=engine, future=True)


def init_database():
    """Initialize database schema"""
    # Import models so their tables are registered on Base.metadata
    from domain.models import reading  # noqa: F401

    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn)
        logger.info("Database tables created successfully")

