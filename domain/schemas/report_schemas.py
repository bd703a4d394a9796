"""Schemas for weekly grouping, PDF reports and email delivery"""

from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, List
from datetime import date

from domain.schemas.reading_schemas import CAMEL_CONFIG, ReadingResponse


class WeekGroupResponse(BaseModel):
    """Readings of one Monday-started week"""

    week_start: date
    week_end: date
    count: int
    average: Optional[float] = None
    in_range_count: int = 0
    readings: List[ReadingResponse] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class WeeklyReportResponse(BaseModel):
    start_date: date
    end_date: date
    reading_count: int
    weeks: List[WeekGroupResponse] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class ReportDeliveryRequest(BaseModel):
    """Build a report on the server, email it and keep a backup"""

    start_date: date
    end_date: date
    to: Optional[EmailStr] = Field(
        None, description="Recipient; the report is only downloaded when omitted"
    )
    user_email: Optional[EmailStr] = Field(None, description="Reply-to address")

    model_config = CAMEL_CONFIG

    @model_validator(mode="after")
    def range_is_ordered(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class ReportDeliveryResponse(BaseModel):
    """Outcome of a delivery; the PDF is always returned for local download"""

    filename: str
    reading_count: int
    page_count: int
    emailed: bool
    backed_up: bool
    backup_url: Optional[str] = None
    message: str
    pdf_base64: str

    model_config = CAMEL_CONFIG


class EmailReportRequest(BaseModel):
    """Body of POST /api/email-report"""

    to: EmailStr
    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)
    reading_count: int = Field(0, ge=0)
    pdf_base64: Optional[str] = None
    user_email: Optional[EmailStr] = None

    model_config = CAMEL_CONFIG


class LegacySendReportRequest(BaseModel):
    """Body of the legacy POST /api/send-report"""

    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)
    recipient_email: EmailStr
    user_email: EmailStr
    pdf_buffer: str = Field(..., min_length=1)
    reading_count: int = Field(..., ge=0)

    model_config = CAMEL_CONFIG


class EmailReportResponse(BaseModel):
    ok: bool = True


class LegacySendReportResponse(BaseModel):
    success: bool
    message: str
