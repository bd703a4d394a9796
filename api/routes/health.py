"""Health check route"""

from fastapi import APIRouter
import logging

from adapters import email_adapter, supabase_adapter
from api.responses import HealthResponse
from app.config import settings

router = APIRouter(tags=["Health"])
logger = logging.getLogger("ander.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check():
    """Liveness plus which hosted providers are wired up"""
    integrations = []
    if supabase_adapter.is_connected():
        integrations.append("supabase")
    if email_adapter.is_configured():
        integrations.append("sendgrid")
    return HealthResponse(
        status="ok",
        service=settings.app_name,
        version=settings.app_version,
        storage_backend=settings.storage_backend.value,
        integrations=integrations,
    )
