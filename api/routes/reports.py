"""Report routes: weekly grouping, PDF download and email delivery"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, Response
from datetime import date
import logging

from api.dependencies import get_current_user, get_reading_store
from api.responses import ERROR_RESPONSES
from app.config import settings
from app.exceptions import ExternalServiceError
from domain.schemas.auth_schemas import CurrentUser
from domain.schemas.reading_schemas import ReadingResponse
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
from repositories.base import ReadingStore
from services.report_service import ReportService

router = APIRouter(prefix="/api", tags=["Reports"], responses=ERROR_RESPONSES)
logger = logging.getLogger("ander.api.reports")


@router.get("/reports/weekly", response_model=WeeklyReportResponse)
def weekly_report(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """Readings of the period grouped into Monday-started weeks, oldest first"""
    weeks = ReportService.weekly(store, user.id, start_date, end_date)
    return WeeklyReportResponse(
        start_date=start_date,
        end_date=end_date,
        reading_count=sum(w.count for w in weeks),
        weeks=[
            WeekGroupResponse(
                week_start=w.week_start,
                week_end=w.week_end,
                count=w.count,
                average=round(w.average, 1) if w.average is not None else None,
                in_range_count=w.in_range_count(settings.target_low, settings.target_high),
                readings=[ReadingResponse.model_validate(r) for r in w.readings],
            )
            for w in weeks
        ],
    )


@router.get(
    "/reports/pdf",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
def download_report(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    report = ReportService.build_report(store, user.id, start_date, end_date)
    return Response(
        content=report.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report.filename}"',
            "X-Reading-Count": str(report.reading_rows),
            "X-Page-Count": str(report.page_count),
        },
    )


@router.post("/reports/deliver", response_model=ReportDeliveryResponse)
def deliver_report(
    request: ReportDeliveryRequest,
    user: CurrentUser = Depends(get_current_user),
    store: ReadingStore = Depends(get_reading_store),
):
    """
    Build the PDF on the server, email it when a recipient is given and keep a
    backup copy. Email or backup failures are reported in the response body;
    the PDF is always returned so the client can save it locally.
    """
    return ReportService.deliver(store, user, request)


@router.post("/email-report", response_model=EmailReportResponse)
def email_report(
    request: EmailReportRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Email a PDF rendered by the client"""
    ReportService.email_report(
        str(request.to),
        request.user_email or user.email,
        request.pdf_base64,
        request.start_date,
        request.end_date,
        request.reading_count,
    )
    return EmailReportResponse(ok=True)


@router.post(
    "/send-report",
    response_model=LegacySendReportResponse,
    responses={500: {"model": LegacySendReportResponse}},
)
def send_report(
    request: LegacySendReportRequest,
    user: CurrentUser = Depends(get_current_user),
):
    """Older clients post the PDF as `pdfBuffer` and expect a success flag"""
    try:
        ReportService.email_report(
            str(request.recipient_email),
            str(request.user_email),
            request.pdf_buffer,
            request.start_date,
            request.end_date,
            request.reading_count,
        )
    except ExternalServiceError as e:
        logger.error(f"Legacy report send failed for user {user.id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Failed to send email"},
        )
    return LegacySendReportResponse(success=True, message="Report sent successfully")
