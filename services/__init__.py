"""Services package - Business logic layer"""

from services.reading_service import ReadingService
from services.report_service import ReportService, ReportBuilder
from services.auth_service import AuthService

# Note: stats_service contains pure aggregation functions, not a class

__all__ = [
    "ReadingService",
    "ReportService",
    "ReportBuilder",
    "AuthService",
]
