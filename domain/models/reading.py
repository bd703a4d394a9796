"""
Blood sugar reading model.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Text,
    Integer,
    Numeric,
    DateTime,
    Enum,
    Uuid,
    CheckConstraint,
    Index,
)
from sqlalchemy.types import TypeDecorator
import uuid

from domain.enums import MealType, ActivityLevel
from domain.models.database import Base


class UTCDateTime(TypeDecorator):
    """Timestamp stored as UTC and always returned timezone-aware.

    SQLite drops tzinfo on the way back, so naive values read from the
    database are re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reading(Base):
    """One logged blood glucose measurement with its context"""

    __tablename__ = "readings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False)
    blood_sugar = Column(Numeric(5, 1, asdecimal=False), nullable=False)
    meal_type = Column(
        Enum(MealType, name="meal_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    carbs = Column(Integer, nullable=False)
    activity_level = Column(
        Enum(
            ActivityLevel,
            name="activity_level",
            values_callable=lambda e: [a.value for a in e],
        ),
        nullable=False,
    )
    timestamp = Column(UTCDateTime(), nullable=False, default=utcnow)
    notes = Column(Text)
    photo_url = Column(Text)

    __table_args__ = (
        CheckConstraint(
            "blood_sugar >= 50 AND blood_sugar <= 500", name="ck_readings_blood_sugar"
        ),
        CheckConstraint("carbs >= 0 AND carbs <= 150", name="ck_readings_carbs"),
        Index("ix_readings_user_timestamp", "user_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return (
            f"<Reading id={self.id} blood_sugar={self.blood_sugar} "
            f"meal_type={getattr(self.meal_type, 'value', self.meal_type)}>"
        )
