"""
Weekly grouping, PDF rendering and delivery of blood sugar reports.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from statistics import fmean
from typing import Dict, List, Optional, Sequence
from uuid import UUID
import base64
import binascii
import logging

from fpdf import FPDF

from adapters import email_adapter, supabase_adapter
from app.config import settings
from app.exceptions import ExternalServiceError, ServiceValidationError
from domain.schemas.auth_schemas import CurrentUser
from domain.schemas.report_schemas import ReportDeliveryRequest, ReportDeliveryResponse
from repositories.base import ReadingStore
from services.stats_service import TARGET_HIGH, TARGET_LOW, classify, in_range_percentage
from domain.enums import RangeStatus

logger = logging.getLogger("ander.reports")


# ============================================================================
# Weekly grouping
# ============================================================================


def _local(ts: datetime, tz: tzinfo) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def week_start(day: date) -> date:
    """Monday of the ISO week containing `day`"""
    return day - timedelta(days=day.weekday())


@dataclass
class WeekGroup:
    """Readings of one Monday-to-Sunday week, oldest first"""

    week_start: date
    readings: List = field(default_factory=list)

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=6)

    @property
    def count(self) -> int:
        return len(self.readings)

    @property
    def average(self) -> Optional[float]:
        values = [float(r.blood_sugar) for r in self.readings]
        return fmean(values) if values else None

    def in_range_count(self, low: float = TARGET_LOW, high: float = TARGET_HIGH) -> int:
        return sum(1 for r in self.readings if low <= float(r.blood_sugar) <= high)


def group_by_week(readings: Sequence, tz: tzinfo = timezone.utc) -> List[WeekGroup]:
    """
    Group readings by the Monday-started week of their local timestamp.

    A reading at Sunday 23:59:59 local time belongs to the week that started
    the Monday before it. Weeks are returned oldest first and only weeks that
    contain readings appear.
    """
    groups: Dict[date, WeekGroup] = {}
    for reading in readings:
        start = week_start(_local(reading.timestamp, tz).date())
        groups.setdefault(start, WeekGroup(week_start=start)).readings.append(reading)

    for group in groups.values():
        group.readings.sort(key=lambda r: r.timestamp)
    return [groups[k] for k in sorted(groups)]


# ============================================================================
# PDF rendering
# ============================================================================


@dataclass
class RenderedReport:
    content: bytes
    filename: str
    generated_on: date
    page_count: int
    reading_rows: int
    header_rows: int
    summary_rows: int


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


class ReportBuilder:
    """
    Tabular A4 report: title block, overall summary, then for each week a
    heading, a column header, one row per reading and a week summary.

    Rows are laid out by hand; a new page is started whenever the next row
    would pass PAGE_BREAK_Y, and the column header is repeated there.
    """

    LEFT = 10.0
    TOP_Y = 20.0
    PAGE_BREAK_Y = 270.0
    ROW_HEIGHT = 7.0
    COLUMNS = (
        ("Date", 26.0),
        ("Time", 18.0),
        ("mg/dL", 20.0),
        ("Meal", 24.0),
        ("Carbs (g)", 18.0),
        ("Activity", 22.0),
        ("Notes", 62.0),
    )

    def __init__(
        self,
        tz: tzinfo = timezone.utc,
        low: float = TARGET_LOW,
        high: float = TARGET_HIGH,
        title: str = "Blood Sugar Report",
    ):
        self.tz = tz
        self.low = low
        self.high = high
        self.title = title

    # -- layout primitives -------------------------------------------------

    def _new_page(self):
        self.pdf.add_page()
        self.y = self.TOP_Y

    def _ensure_space(self, repeat_header: bool = False):
        if self.y + self.ROW_HEIGHT > self.PAGE_BREAK_Y:
            self._new_page()
            if repeat_header:
                self._table_header()

    def _line(self, text: str, size: int = 10, style: str = "", height: float = None):
        height = height or self.ROW_HEIGHT
        self._ensure_space()
        self.pdf.set_font("Helvetica", style=style, size=size)
        self.pdf.set_xy(self.LEFT, self.y)
        self.pdf.cell(0, height, _latin1(text))
        self.y += height

    def _fit(self, text: str, width: float) -> str:
        """Clip `text` with an ellipsis so it fits a cell `width` mm wide"""
        limit = width - 2
        # no Helvetica glyph at 9pt is narrower than 0.5 mm
        text = _latin1(text[: int(width * 2) + 1])
        if self.pdf.get_string_width(text) <= limit:
            return text
        lo, hi = 0, len(text) - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self.pdf.get_string_width(text[:mid] + "...") <= limit:
                lo = mid
            else:
                hi = mid - 1
        return text[:lo] + "..."

    def _table_header(self):
        self.pdf.set_font("Helvetica", style="B", size=9)
        self.pdf.set_fill_color(229, 231, 235)
        x = self.LEFT
        for label, width in self.COLUMNS:
            self.pdf.set_xy(x, self.y)
            self.pdf.cell(width, self.ROW_HEIGHT, label, border=1, fill=True)
            x += width
        self.y += self.ROW_HEIGHT
        self.header_rows += 1

    def _reading_row(self, reading):
        self._ensure_space(repeat_header=True)
        local = _local(reading.timestamp, self.tz)
        value = float(reading.blood_sugar)
        status = classify(value, self.low, self.high)
        cells = [
            local.strftime("%a %b %d"),
            local.strftime("%I:%M %p"),
            f"{value:g}",
            str(getattr(reading.meal_type, "value", reading.meal_type)).capitalize(),
            str(reading.carbs),
            str(getattr(reading.activity_level, "value", reading.activity_level)).capitalize(),
            reading.notes or "",
        ]
        self.pdf.set_font("Helvetica", size=9)
        x = self.LEFT
        for (label, width), text in zip(self.COLUMNS, cells):
            if label == "mg/dL" and status == RangeStatus.HIGH:
                self.pdf.set_text_color(220, 38, 38)
            elif label == "mg/dL" and status == RangeStatus.LOW:
                self.pdf.set_text_color(37, 99, 235)
            self.pdf.set_xy(x, self.y)
            self.pdf.cell(width, self.ROW_HEIGHT, self._fit(text, width), border=1)
            self.pdf.set_text_color(0, 0, 0)
            x += width
        self.y += self.ROW_HEIGHT
        self.reading_rows += 1

    def _summary(self, text: str, style: str = ""):
        self._line(text, size=10, style=style)
        self.summary_rows += 1

    # -- document ---------------------------------------------------------

    def build(self, readings: Sequence, start: date, end: date) -> RenderedReport:
        """
        Render the report for readings between `start` and `end`.

        Args:
            readings: readings to include, any order
            start, end: period shown in the title block

        Returns:
            RenderedReport with the PDF bytes and row/page counts
        """
        self.pdf = FPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(auto=False)
        self.pdf.set_title(self.title)
        self.pdf.set_creator(settings.app_name)
        self.reading_rows = self.header_rows = self.summary_rows = 0
        self._new_page()

        self._line(self.title, size=16, style="B", height=10)
        self._line(f"Period: {start.isoformat()} to {end.isoformat()}")
        generated_on = datetime.now(self.tz).date()
        self._line(f"Generated: {generated_on.isoformat()}")
        self.y += self.ROW_HEIGHT / 2

        values = [float(r.blood_sugar) for r in readings]
        if not values:
            self._summary("No readings in this period.")
        else:
            self._summary(f"Total readings: {len(values)}", style="B")
            self._summary(f"Average: {fmean(values):.1f} mg/dL")
            self._summary(
                f"In range ({self.low:g}-{self.high:g} mg/dL): "
                f"{in_range_percentage(readings, self.low, self.high):.0f}%"
            )

        for week in group_by_week(readings, self.tz):
            self.y += self.ROW_HEIGHT / 2
            # keep the week heading with its column header and first row
            if self.y + 3 * self.ROW_HEIGHT > self.PAGE_BREAK_Y:
                self._new_page()
            self._line(
                f"Week of {week.week_start.strftime('%a %b %d, %Y')} - "
                f"{week.week_end.strftime('%a %b %d, %Y')}",
                size=11,
                style="B",
            )
            self.header_rows += 1
            self._table_header()
            for reading in week.readings:
                self._reading_row(reading)
            self._summary(
                f"{week.count} readings, average {week.average:.1f} mg/dL, "
                f"{week.in_range_count(self.low, self.high)} in range",
                style="I",
            )

        content = bytes(self.pdf.output())
        report = RenderedReport(
            content=content,
            filename=email_adapter.report_filename(start.isoformat(), end.isoformat()),
            generated_on=generated_on,
            page_count=self.pdf.page_no(),
            reading_rows=self.reading_rows,
            header_rows=self.header_rows,
            summary_rows=self.summary_rows,
        )
        logger.info(
            "Rendered report %s: %d readings, %d pages, %d bytes",
            report.filename,
            report.reading_rows,
            report.page_count,
            len(content),
        )
        return report


# ============================================================================
# Service
# ============================================================================


def decode_pdf(payload: Optional[str]) -> bytes:
    """Decode a base64 PDF, tolerating a data: URL prefix"""
    if not payload:
        return b""
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ServiceValidationError(
            "PDF payload is not valid base64", code="INVALID_PDF"
        ) from exc


class ReportService:
    @staticmethod
    def period_bounds(start: date, end: date, tz: tzinfo) -> tuple:
        """First and last instant of a date range in `tz`"""
        if end < start:
            raise ServiceValidationError("End date must not be before start date")
        return (
            datetime.combine(start, time.min, tzinfo=tz),
            datetime.combine(end, time.max, tzinfo=tz),
        )

    @staticmethod
    def readings_for_period(store: ReadingStore, user_id: UUID, start: date, end: date):
        lower, upper = ReportService.period_bounds(start, end, settings.tzinfo)
        return store.list_by_range(user_id, lower, upper)

    @staticmethod
    def weekly(store: ReadingStore, user_id: UUID, start: date, end: date) -> List[WeekGroup]:
        readings = ReportService.readings_for_period(store, user_id, start, end)
        return group_by_week(readings, settings.tzinfo)

    @staticmethod
    def build_report(
        store: ReadingStore, user_id: UUID, start: date, end: date
    ) -> RenderedReport:
        readings = ReportService.readings_for_period(store, user_id, start, end)
        builder = ReportBuilder(
            tz=settings.tzinfo, low=settings.target_low, high=settings.target_high
        )
        return builder.build(readings, start, end)

    @staticmethod
    def backup_report(user_id: UUID, report: RenderedReport) -> Optional[str]:
        """Best-effort copy to object storage; returns the URL or None"""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        path = f"{user_id}/{stamp}-{report.filename}"
        try:
            return supabase_adapter.upload_file(
                settings.report_bucket, path, report.content, "application/pdf"
            )
        except ExternalServiceError as e:
            logger.warning(f"Report backup skipped for user {user_id}: {e}")
            return None

    @staticmethod
    def deliver(
        store: ReadingStore, user: CurrentUser, request: ReportDeliveryRequest
    ) -> ReportDeliveryResponse:
        """
        Build the report, then email it and back it up independently.

        Neither the email nor the backup can fail the request: the PDF is
        always returned so the client can offer it as a download.
        """
        report = ReportService.build_report(
            store, user.id, request.start_date, request.end_date
        )

        emailed = False
        if request.to:
            emailed = email_adapter.send_blood_sugar_report(
                str(request.to),
                request.user_email or user.email,
                report.content,
                request.start_date.isoformat(),
                request.end_date.isoformat(),
                report.reading_rows,
            )
            if not emailed:
                logger.warning(
                    f"Email delivery failed for user {user.id}; falling back to download"
                )

        backup_url = ReportService.backup_report(user.id, report)

        if emailed:
            message = f"Report emailed to {request.to}"
        elif request.to:
            message = "Email could not be sent; the PDF is available for download"
        else:
            message = "Report ready for download"
        if backup_url is None:
            message += " (backup copy not saved)"

        logger.info(
            f"report_delivered user_id={user.id} readings={report.reading_rows} "
            f"emailed={emailed} backed_up={backup_url is not None}"
        )

        return ReportDeliveryResponse(
            filename=report.filename,
            reading_count=report.reading_rows,
            page_count=report.page_count,
            emailed=emailed,
            backed_up=backup_url is not None,
            backup_url=backup_url,
            message=message,
            pdf_base64=base64.b64encode(report.content).decode("ascii"),
        )

    @staticmethod
    def email_report(
        to: str,
        user_email: Optional[str],
        pdf_base64: Optional[str],
        start: str,
        end: str,
        reading_count: int,
    ) -> None:
        """
        Send a client-rendered PDF.

        Raises:
            ServiceValidationError: If the PDF payload is not base64
            ExternalServiceError: If the provider did not accept the email (HTTP 500)
        """
        pdf_bytes = decode_pdf(pdf_base64)
        ok = email_adapter.send_blood_sugar_report(
            to, user_email, pdf_bytes, start, end, reading_count
        )
        if not ok:
            raise ExternalServiceError(
                "Failed to send email", code="EMAIL_SEND_FAILED", http_status=500
            )
        logger.info(f"Report {start}..{end} emailed to {to} ({reading_count} readings)")
