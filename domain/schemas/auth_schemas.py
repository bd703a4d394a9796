"""Schemas for session authentication against the hosted provider"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from uuid import UUID

from domain.schemas.reading_schemas import CAMEL_CONFIG


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class CurrentUser(BaseModel):
    """Identity attached to a request"""

    id: UUID
    email: Optional[str] = None

    model_config = CAMEL_CONFIG


class SessionResponse(BaseModel):
    """Tokens issued on login; signup may return no session until email is confirmed"""

    user: CurrentUser
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    email_confirmation_required: bool = False

    model_config = CAMEL_CONFIG
