"""
Supabase Reading Repository - readings kept in the hosted `readings` table
"""

from typing import List, Optional, Mapping, Any
from uuid import UUID
from datetime import datetime
import logging

from repositories.base import ReadingStore
from adapters import supabase_adapter
from app.exceptions import ExternalServiceError
from domain.mappers import ReadingMapper
from domain.models import Reading
from domain.models.reading import utcnow

logger = logging.getLogger("ander.repositories.supabase")


class SupabaseReadingRepository(ReadingStore):
    """Reading store backed by the hosted row API"""

    def __init__(self, table_name: str = "readings"):
        self.table_name = table_name

    def _table(self):
        return supabase_adapter.table(self.table_name)

    def _execute(self, query, action: str) -> List[dict]:
        try:
            return query.execute().data or []
        except ExternalServiceError:
            raise
        except Exception as exc:
            logger.error("Supabase %s on %s failed: %s", action, self.table_name, exc)
            raise ExternalServiceError(f"Failed to {action} readings: {exc}") from exc

    def list_readings(self, user_id: UUID) -> List[Reading]:
        query = (
            self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .order("timestamp", desc=True)
        )
        return [ReadingMapper.from_row(row) for row in self._execute(query, "fetch")]

    def get_reading(self, user_id: UUID, reading_id: UUID) -> Optional[Reading]:
        query = (
            self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .eq("id", str(reading_id))
            .limit(1)
        )
        rows = self._execute(query, "fetch")
        return ReadingMapper.from_row(rows[0]) if rows else None

    def create_reading(self, user_id: UUID, data: Mapping[str, Any]) -> Reading:
        fields = dict(data)
        if fields.get("timestamp") is None:
            fields["timestamp"] = utcnow()
        row = ReadingMapper.to_row(fields)
        row["user_id"] = str(user_id)
        rows = self._execute(self._table().insert(row), "insert")
        if not rows:
            raise ExternalServiceError("Insert returned no row")
        return ReadingMapper.from_row(rows[0])

    def update_reading(
        self, user_id: UUID, reading_id: UUID, changes: Mapping[str, Any]
    ) -> Optional[Reading]:
        row = ReadingMapper.to_row(changes)
        if not row:
            return self.get_reading(user_id, reading_id)
        query = (
            self._table()
            .update(row)
            .eq("user_id", str(user_id))
            .eq("id", str(reading_id))
        )
        rows = self._execute(query, "update")
        return ReadingMapper.from_row(rows[0]) if rows else None

    def delete_reading(self, user_id: UUID, reading_id: UUID) -> bool:
        query = (
            self._table()
            .delete()
            .eq("user_id", str(user_id))
            .eq("id", str(reading_id))
        )
        return bool(self._execute(query, "delete"))

    def list_by_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> List[Reading]:
        query = (
            self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .gte("timestamp", start.isoformat())
            .lte("timestamp", end.isoformat())
            .order("timestamp", desc=True)
        )
        return [ReadingMapper.from_row(row) for row in self._execute(query, "fetch")]
