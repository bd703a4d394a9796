"""
API dependencies for dependency injection
"""

from typing import Generator, Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from domain.enums import StorageBackend
from domain.models import SessionLocal
from domain.schemas.auth_schemas import CurrentUser
from repositories import (
    ReadingStore,
    ReadingRepository,
    SupabaseReadingRepository,
    memory_store,
)
from services.auth_service import AuthService

bearer_scheme = HTTPBearer(auto_error=False)


def get_reading_store() -> Generator[ReadingStore, None, None]:
    """Reading store for the configured backend"""
    if settings.storage_backend == StorageBackend.SQL:
        db = SessionLocal()
        try:
            yield ReadingRepository(db)
        finally:
            db.close()
    elif settings.storage_backend == StorageBackend.SUPABASE:
        yield SupabaseReadingRepository(settings.readings_table)
    else:
        yield memory_store


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user(access_token: Optional[str] = Depends(get_access_token)) -> CurrentUser:
    """Authenticated caller (or the default user when auth is disabled)"""
    return AuthService.resolve_user(access_token)
