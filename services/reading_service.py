from typing import List, Optional
from datetime import date, datetime, time, timezone, tzinfo
from uuid import UUID
import logging
import time as clock

from adapters import supabase_adapter
from app.config import settings
from app.exceptions import NotFoundError, ServiceValidationError
from domain.schemas.reading_schemas import (
    ReadingCreate,
    ReadingUpdate,
    ReadingResponse,
    PhotoUploadResponse,
)
from domain.schemas.stats_schemas import ReadingStats, InsightsResponse
from repositories.base import ReadingStore
from services import stats_service

logger = logging.getLogger("ander.readings")


def parse_range_bound(value: str, end: bool = False, tz: tzinfo = timezone.utc) -> datetime:
    """
    Parse a range path parameter.

    Accepts an ISO date (``2024-05-01``) or datetime. A bare date as the end
    bound covers that whole day; naive datetimes are read in `tz`.

    Raises:
        ServiceValidationError: If the value is not an ISO date or datetime
    """
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(day, time.max if end else time.min, tzinfo=tz)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ServiceValidationError("Invalid date format", code="INVALID_DATE") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


class ReadingService:
    @staticmethod
    def list_readings(store: ReadingStore, user_id: UUID) -> List[ReadingResponse]:
        readings = store.list_readings(user_id)
        logger.debug(f"Fetched {len(readings)} readings for user {user_id}")
        return [ReadingResponse.model_validate(r) for r in readings]

    @staticmethod
    def get_reading(store: ReadingStore, user_id: UUID, reading_id: UUID) -> ReadingResponse:
        """
        Fetch one reading.

        Raises:
            NotFoundError: If the reading does not exist for this user
        """
        reading = store.get_reading(user_id, reading_id)
        if reading is None:
            raise NotFoundError("Reading not found", details={"id": str(reading_id)})
        return ReadingResponse.model_validate(reading)

    @staticmethod
    def create_reading(
        store: ReadingStore, user_id: UUID, data: ReadingCreate
    ) -> ReadingResponse:
        """
        Log a new reading. The timestamp defaults to now; backdated timestamps
        are accepted as-is.
        """
        reading = store.create_reading(user_id, data.model_dump())
        logger.info(
            f"reading_logged user_id={user_id} reading_id={reading.id} "
            f"blood_sugar={reading.blood_sugar} meal={data.meal_type.value} "
            f"carbs={data.carbs} activity={data.activity_level.value}"
        )
        return ReadingResponse.model_validate(reading)

    @staticmethod
    def update_reading(
        store: ReadingStore, user_id: UUID, reading_id: UUID, data: ReadingUpdate
    ) -> ReadingResponse:
        """
        Apply a partial update.

        Raises:
            NotFoundError: If the reading does not exist for this user
        """
        changes = data.changes()
        reading = store.update_reading(user_id, reading_id, changes)
        if reading is None:
            raise NotFoundError("Reading not found", details={"id": str(reading_id)})
        logger.info(
            f"reading_updated user_id={user_id} reading_id={reading_id} "
            f"fields={sorted(changes)}"
        )
        return ReadingResponse.model_validate(reading)

    @staticmethod
    def delete_reading(store: ReadingStore, user_id: UUID, reading_id: UUID) -> None:
        if not store.delete_reading(user_id, reading_id):
            raise NotFoundError("Reading not found", details={"id": str(reading_id)})
        logger.info(f"reading_deleted user_id={user_id} reading_id={reading_id}")

    @staticmethod
    def list_by_range(
        store: ReadingStore, user_id: UUID, start: str, end: str
    ) -> List[ReadingResponse]:
        """Readings between two ISO dates/datetimes, inclusive, newest first"""
        lower = parse_range_bound(start, tz=settings.tzinfo)
        upper = parse_range_bound(end, end=True, tz=settings.tzinfo)
        readings = store.list_by_range(user_id, lower, upper)
        return [ReadingResponse.model_validate(r) for r in readings]

    @staticmethod
    def get_stats(
        store: ReadingStore, user_id: UUID, now: Optional[datetime] = None
    ) -> ReadingStats:
        return stats_service.compute_stats(
            store.list_readings(user_id),
            now=now,
            tz=settings.tzinfo,
            low=settings.target_low,
            high=settings.target_high,
        )

    @staticmethod
    def get_insights(
        store: ReadingStore, user_id: UUID, now: Optional[datetime] = None
    ) -> InsightsResponse:
        return stats_service.compute_insights(
            store.list_readings(user_id),
            now=now,
            tz=settings.tzinfo,
            low=settings.target_low,
            high=settings.target_high,
        )

    @staticmethod
    def upload_meal_photo(
        user_id: UUID, filename: str, content: bytes, content_type: Optional[str]
    ) -> PhotoUploadResponse:
        """
        Store a meal photo in the photo bucket and return its public URL.

        Raises:
            ServiceValidationError: If the file is not an image, empty or too large
            ExternalServiceError: If the storage upload fails
        """
        if not content_type or not content_type.startswith("image/"):
            raise ServiceValidationError("Meal photo must be an image", code="INVALID_PHOTO")
        if not content:
            raise ServiceValidationError("Meal photo is empty", code="INVALID_PHOTO")
        if len(content) > settings.max_photo_bytes:
            raise ServiceValidationError(
                "Meal photo is too large",
                code="PHOTO_TOO_LARGE",
                details={"max_bytes": settings.max_photo_bytes},
            )

        safe_name = "".join(
            c if c.isalnum() or c in "._-" else "_" for c in (filename or "photo")
        )
        path = f"{user_id}/{int(clock.time() * 1000)}-{safe_name}"
        url = supabase_adapter.upload_file(
            settings.meal_photo_bucket, path, content, content_type
        )
        return PhotoUploadResponse(url=url, path=path)
