"""Session authentication backed by the hosted auth provider"""

from typing import Optional
from uuid import UUID
import logging

from adapters import supabase_adapter
from app.config import settings
from app.exceptions import UnauthorizedError
from domain.schemas.auth_schemas import CurrentUser, SessionResponse

logger = logging.getLogger("ander.auth")


class AuthService:
    @staticmethod
    def resolve_user(access_token: Optional[str]) -> CurrentUser:
        """
        Identify the caller.

        With authentication disabled every request belongs to the configured
        default user. Otherwise a bearer token is required and verified with
        the provider.

        Raises:
            UnauthorizedError: If the token is missing or rejected
        """
        if not settings.auth_enabled:
            return CurrentUser(id=settings.default_user_id)
        if not access_token:
            raise UnauthorizedError("Authentication required", code="AUTH_REQUIRED")
        user = supabase_adapter.get_user(access_token)
        return CurrentUser(id=UUID(user["id"]), email=user.get("email"))

    @staticmethod
    def _session(payload: dict) -> SessionResponse:
        user = payload["user"]
        return SessionResponse(
            user=CurrentUser(id=UUID(user["id"]), email=user.get("email")),
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            email_confirmation_required=payload.get("access_token") is None,
        )

    @staticmethod
    def sign_up(email: str, password: str) -> SessionResponse:
        session = AuthService._session(supabase_adapter.sign_up(email, password))
        logger.info(
            f"user_signed_up user_id={session.user.id} "
            f"confirmation_required={session.email_confirmation_required}"
        )
        return session

    @staticmethod
    def login(email: str, password: str) -> SessionResponse:
        session = AuthService._session(supabase_adapter.sign_in(email, password))
        logger.info(f"user_logged_in user_id={session.user.id}")
        return session

    @staticmethod
    def logout(access_token: Optional[str]) -> None:
        if not access_token:
            raise UnauthorizedError("Authentication required", code="AUTH_REQUIRED")
        supabase_adapter.sign_out(access_token)
        logger.info("user_logged_out")
