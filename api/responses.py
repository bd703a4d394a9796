"""
Standardized API response models.
Used for OpenAPI documentation of the error envelope and health checks.
"""

from typing import Optional, Any, List
from pydantic import BaseModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    """Detailed error information"""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: Optional[Any] = Field(
        None, description="Field errors or additional context"
    )


class ErrorResponse(BaseModel):
    """Standardized error response"""

    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: Optional[str] = Field(None, description="Service version")
    storage_backend: str = Field(..., description="Active reading store")
    integrations: List[str] = Field(
        default_factory=list, description="Hosted providers that are configured"
    )
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Authentication required"},
}

NOT_FOUND_RESPONSES = {
    **ERROR_RESPONSES,
    404: {"model": ErrorResponse, "description": "Reading not found"},
}
