"""
In-memory reading store.

A single process-wide dict keyed by reading id. Suitable for a single-process
demo only: nothing is shared between workers and everything is lost on restart.
"""

import threading
import uuid
from typing import Dict, List, Optional, Mapping, Any
from uuid import UUID

from repositories.base import ReadingStore
from domain.models import Reading
from domain.models.reading import utcnow


class MemoryReadingRepository(ReadingStore):
    """Reading store backed by process memory"""

    def __init__(self):
        self._readings: Dict[UUID, Reading] = {}
        self._lock = threading.Lock()

    def list_readings(self, user_id: UUID) -> List[Reading]:
        with self._lock:
            owned = [r for r in self._readings.values() if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.timestamp, reverse=True)

    def get_reading(self, user_id: UUID, reading_id: UUID) -> Optional[Reading]:
        reading = self._readings.get(reading_id)
        if reading is None or reading.user_id != user_id:
            return None
        return reading

    def create_reading(self, user_id: UUID, data: Mapping[str, Any]) -> Reading:
        fields = dict(data)
        if fields.get("timestamp") is None:
            fields["timestamp"] = utcnow()
        reading = Reading(id=uuid.uuid4(), user_id=user_id, **fields)
        with self._lock:
            self._readings[reading.id] = reading
        return reading

    def update_reading(
        self, user_id: UUID, reading_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Reading]:
        with self._lock:
            reading = self.get_reading(user_id, reading_id)
            if reading is None:
                return None
            for key, value in changes.items():
                setattr(reading, key, value)
        return reading

    def delete_reading(self, user_id: UUID, reading_id: UUID) -> bool:
        with self._lock:
            if self.get_reading(user_id, reading_id) is None:
                return False
            del self._readings[reading_id]
        return True

    def clear(self) -> None:
        with self._lock:
            self._readings.clear()

    def __len__(self) -> int:
        return len(self._readings)


# Process-wide store used when settings.storage_backend is "memory"
memory_store = MemoryReadingRepository()
