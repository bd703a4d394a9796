"""Blood sugar reading routes: CRUD, date ranges, statistics and meal photos"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response
from typing import List
from uuid import UUID
import logging
import anyio

from api.dependencies import get_current_user, get_reading_store
from api.responses import ERROR_RESPONSES, NOT_FOUND_RESPONSES
from app.config import settings
from domain.schemas.auth_schemas import CurrentUser
from domain.schemas.reading_schemas import (
    ReadingCreate,
    ReadingUpdate,
    ReadingResponse,
    PhotoUploadResponse,
)
from domain.schemas.stats_schemas import ReadingStats, InsightsResponse
from repositories.base import ReadingStore
from services.reading_service import ReadingService

router = APIRouter(prefix="/api", tags=["Readings"], responses=ERROR_RESPONSES)
logger = logging.getLogger("ander.api.readings")


@router.get("/blood-sugar-readings", response_model=List[ReadingResponse])
def list_readings(
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """All readings of the caller, newest first"""
    return ReadingService.list_readings(store, user.id)


@router.post(
    "/blood-sugar-readings",
    response_model=ReadingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_reading(
    reading: ReadingCreate,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """
    Log a reading.

    Validation (blood sugar 50-500 mg/dL, carbs 0-150 g, known meal type and
    activity level) happens before the service is called; failures come back
    as 400 with one entry per offending field.
    """
    return ReadingService.create_reading(store, user.id, reading)


@router.get(
    "/blood-sugar-readings/range/{start_date}/{end_date}",
    response_model=List[ReadingResponse],
)
def list_readings_in_range(
    start_date: str,
    end_date: str,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """Readings between two ISO dates or datetimes (inclusive)"""
    return ReadingService.list_by_range(store, user.id, start_date, end_date)


@router.get(
    "/blood-sugar-readings/{reading_id}",
    response_model=ReadingResponse,
    responses=NOT_FOUND_RESPONSES,
)
def get_reading(
    reading_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    return ReadingService.get_reading(store, user.id, reading_id)


@router.patch(
    "/blood-sugar-readings/{reading_id}",
    response_model=ReadingResponse,
    responses=NOT_FOUND_RESPONSES,
)
def update_reading(
    reading_id: UUID,
    changes: ReadingUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """Partial update; the same range checks as creation apply"""
    return ReadingService.update_reading(store, user.id, reading_id, changes)


@router.delete(
    "/blood-sugar-readings/{reading_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND_RESPONSES,
)
def delete_reading(
    reading_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    ReadingService.delete_reading(store, user.id, reading_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/blood-sugar-stats", response_model=ReadingStats)
def get_stats(
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """
    Headline statistics: last reading, today's and yesterday's averages,
    in-range share (70-140 mg/dL) and the 7-day trend arrow.
    """
    return ReadingService.get_stats(store, user.id)


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """7-day average, reading distribution, meal analysis and recommendations"""
    return ReadingService.get_insights(store, user.id)


@router.post(
    "/meal-photos",
    response_model=PhotoUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_meal_photo(
    photo: UploadFile = File(..., description="Image of the meal"),
    user: CurrentUser = Depends(get_current_user),
):
    """Upload a meal photo; the returned URL goes into the reading's photoUrl"""
    # one byte past the limit is enough to reject oversized uploads
    content = await photo.read(settings.max_photo_bytes + 1)
    # storage upload is blocking I/O
    result = await anyio.to_thread.run_sync(
        ReadingService.upload_meal_photo,
        user.id,
        photo.filename,
        content,
        photo.content_type,
    )
    logger.info(f"meal_photo_uploaded user_id={user.id} path={result.path}")
    return result
