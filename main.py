"""
Ander FastAPI Application
Blood sugar tracking API: readings, statistics, insights and PDF reports
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio

from api.routes import readings, reports, auth, health

from domain.enums import StorageBackend
from domain.models import init_database
from adapters import email_adapter, supabase_adapter

from app.config import settings

from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    app_exception_handler,
    general_exception_handler,
)
from app.exceptions import AppError

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()), format=settings.log_format
)
_logger = logging.getLogger("ander.main")


async def _init_database_with_retries():
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # Run blocking init in a thread to avoid blocking the event loop
            await anyio.to_thread.run_sync(init_database)
            _logger.info("Database initialization succeeded")
            return
        except Exception as exc:
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error(
                    "Database initialization failed after %d attempts", attempt
                )
                raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Creates the SQL schema when that backend is selected and wires up the
    hosted providers, which are optional.
    """
    _logger.info(
        f"Starting Ander in {settings.environment.value} mode "
        f"(storage={settings.storage_backend.value})"
    )

    if settings.storage_backend == StorageBackend.SQL:
        await _init_database_with_retries()

    # Hosted backend (best-effort)
    try:
        supabase_adapter.connect(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        _logger.warning("Failed to initialize Supabase adapter: %s", e)

    if settings.storage_backend == StorageBackend.SUPABASE and not supabase_adapter.is_connected():
        _logger.error("Storage backend is supabase but the hosted backend is not configured")

    # Email provider (best-effort)
    try:
        email_adapter.connect(settings.sendgrid_api_key, settings.sendgrid_from)
    except Exception as e:
        _logger.warning("Failed to initialize email adapter; reports download only: %s", e)

    try:
        yield
    finally:
        _logger.info("Shutting down Ander")
        supabase_adapter.close()
        email_adapter.close()


app = FastAPI(
    title=settings.api_title,
    version=settings.app_version,
    description=settings.api_description,
    lifespan=lifespan,
    debug=settings.debug,
    openapi_url="/api/openapi.json" if not settings.is_production() else None,
    docs_url="/api/docs" if not settings.is_production() else None,
    redoc_url="/api/redoc" if not settings.is_production() else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(AppError, app_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(readings.router)
app.include_router(reports.router)
app.include_router(auth.router)
app.include_router(health.router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
