"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.reading_schemas import (
    ReadingCreate,
    ReadingUpdate,
    ReadingResponse,
    PhotoUploadResponse,
)
from domain.schemas.stats_schemas import (
    ReadingStats,
    MealTrend,
    MealAverage,
    ReadingDistribution,
    InsightsResponse,
)
from domain.schemas.report_schemas import (
    WeekGroupResponse,
    WeeklyReportResponse,
    ReportDeliveryRequest,
    ReportDeliveryResponse,
    EmailReportRequest,
    EmailReportResponse,
    LegacySendReportRequest,
    LegacySendReportResponse,
)
from domain.schemas.auth_schemas import Credentials, CurrentUser, SessionResponse

__all__ = [
    # Reading schemas
    "ReadingCreate",
    "ReadingUpdate",
    "ReadingResponse",
    "PhotoUploadResponse",
    # Stats schemas
    "ReadingStats",
    "MealTrend",
    "MealAverage",
    "ReadingDistribution",
    "InsightsResponse",
    # Report schemas
    "WeekGroupResponse",
    "WeeklyReportResponse",
    "ReportDeliveryRequest",
    "ReportDeliveryResponse",
    "EmailReportRequest",
    "EmailReportResponse",
    "LegacySendReportRequest",
    "LegacySendReportResponse",
    # Auth schemas
    "Credentials",
    "CurrentUser",
    "SessionResponse",
]
