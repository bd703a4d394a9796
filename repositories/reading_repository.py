"""
Reading Repository - SQLAlchemy data access for blood sugar readings
"""

from typing import List, Optional, Mapping, Any
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session

from repositories.base import BaseRepository, ReadingStore
from domain.models import Reading
from domain.models.reading import utcnow


class ReadingRepository(BaseRepository[Reading], ReadingStore):
    """Repository for reading data access"""

    def __init__(self, db: Session):
        super().__init__(db, Reading)

    def _user_query(self, user_id: UUID):
        return self.db.query(Reading).filter(Reading.user_id == user_id)

    def list_readings(self, user_id: UUID) -> List[Reading]:
        """Get all readings for a user, newest first"""
        return self._user_query(user_id).order_by(Reading.timestamp.desc()).all()

    def get_reading(self, user_id: UUID, reading_id: UUID) -> Optional[Reading]:
        """Get a reading owned by the user"""
        reading = self.get_by_id(reading_id)
        if reading is None or reading.user_id != user_id:
            return None
        return reading

    def create_reading(self, user_id: UUID, data: Mapping[str, Any]) -> Reading:
        """Create a new reading"""
        fields = dict(data)
        if fields.get("timestamp") is None:
            fields["timestamp"] = utcnow()
        return self.create(Reading(user_id=user_id, **fields))

    def update_reading(
        self, user_id: UUID, reading_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Reading]:
        """Apply changes to an existing reading"""
        reading = self.get_reading(user_id, reading_id)
        if reading is None:
            return None
        for key, value in changes.items():
            setattr(reading, key, value)
        return self.update(reading)

    def delete_reading(self, user_id: UUID, reading_id: UUID) -> bool:
        """Delete a reading owned by the user"""
        reading = self.get_reading(user_id, reading_id)
        if reading is None:
            return False
        self.db.delete(reading)
        self.db.commit()
        return True

    def list_by_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> List[Reading]:
        """Get readings within [start, end], newest first"""
        return (
            self._user_query(user_id)
            .filter(Reading.timestamp >= start, Reading.timestamp <= end)
            .order_by(Reading.timestamp.desc())
            .all()
        )
