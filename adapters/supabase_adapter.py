"""
Hosted backend adapter (Supabase): session auth, object storage and row access.

Module-level client, created once at startup with connect(). Every call made
while the client is missing raises ExternalServiceError so callers can decide
whether the failure is fatal.
"""

from typing import Optional, Dict, Any
import logging

from supabase import create_client, Client

from app.exceptions import ExternalServiceError, UnauthorizedError

logger = logging.getLogger("ander.supabase")

_client: Optional[Client] = None
_url: Optional[str] = None
_key: Optional[str] = None


def connect(url: Optional[str], key: Optional[str]):
    """Initialize the Supabase client.

    Missing credentials leave the adapter disconnected; features that need the
    hosted backend then fail with ExternalServiceError.
    """
    global _client, _url, _key
    if not url or not key:
        logger.warning("Supabase URL/key not configured; hosted backend disabled")
        _client = None
        return
    try:
        _client = create_client(url, key)
        _url, _key = url, key
        logger.info("Connected to Supabase %s", url)
    except Exception as exc:
        _client = None
        logger.warning("Could not initialize Supabase client: %s", exc)


def close():
    global _client, _url, _key
    _client = None
    _url = _key = None
    logger.info("Supabase client released")


def is_connected() -> bool:
    return _client is not None


def _require_client() -> Client:
    if _client is None:
        raise ExternalServiceError(
            "Hosted backend not configured. Set SUPABASE_URL and SUPABASE_KEY.",
            code="BACKEND_UNAVAILABLE",
        )
    return _client


def _fresh_client() -> Client:
    """A throwaway client for sign-in/sign-up so sessions never leak between users"""
    _require_client()
    return create_client(_url, _key)


# ============================================================================
# Rows
# ============================================================================


def table(name: str):
    """Query builder for a hosted table"""
    return _require_client().table(name)


# ============================================================================
# Auth
# ============================================================================


def _user_dict(user) -> Dict[str, Any]:
    return {"id": str(user.id), "email": getattr(user, "email", None)}


def get_user(access_token: str) -> Dict[str, Any]:
    """
    Resolve an access token to the user it was issued for.

    Returns:
        {"id": "<uuid>", "email": "..."}

    Raises:
        UnauthorizedError: If the token is invalid or expired
        ExternalServiceError: If the hosted backend is not configured
    """
    client = _require_client()
    try:
        response = client.auth.get_user(access_token)
    except Exception as exc:
        logger.info("Token rejected by auth provider: %s", exc)
        raise UnauthorizedError("Invalid or expired session") from exc
    if response is None or response.user is None:
        raise UnauthorizedError("Invalid or expired session")
    return _user_dict(response.user)


def _session_dict(response) -> Dict[str, Any]:
    session = response.session
    return {
        "user": _user_dict(response.user),
        "access_token": session.access_token if session else None,
        "refresh_token": session.refresh_token if session else None,
        "expires_in": session.expires_in if session else None,
    }


def sign_up(email: str, password: str) -> Dict[str, Any]:
    """Register a user; session is None until the email is confirmed"""
    try:
        response = _fresh_client().auth.sign_up({"email": email, "password": password})
    except ExternalServiceError:
        raise
    except Exception as exc:
        logger.warning("Sign-up failed for %s: %s", email, exc)
        raise ExternalServiceError(f"Sign-up failed: {exc}", http_status=400) from exc
    if response.user is None:
        raise ExternalServiceError("Sign-up failed", http_status=400)
    return _session_dict(response)


def sign_in(email: str, password: str) -> Dict[str, Any]:
    """Password login"""
    try:
        response = _fresh_client().auth.sign_in_with_password(
            {"email": email, "password": password}
        )
    except ExternalServiceError:
        raise
    except Exception as exc:
        logger.info("Login failed for %s: %s", email, exc)
        raise UnauthorizedError("Invalid email or password") from exc
    if response.user is None or response.session is None:
        raise UnauthorizedError("Invalid email or password")
    return _session_dict(response)


def sign_out(access_token: str) -> None:
    """Revoke the session behind an access token"""
    client = _require_client()
    try:
        client.auth.admin.sign_out(access_token)
    except Exception as exc:
        logger.warning("Sign-out failed: %s", exc)
        raise ExternalServiceError(f"Sign-out failed: {exc}") from exc


# ============================================================================
# Object storage
# ============================================================================


def upload_file(bucket: str, path: str, content: bytes, content_type: str) -> str:
    """
    Upload bytes to a storage bucket and return the public URL.

    Raises:
        ExternalServiceError: If the upload is rejected or the backend is unavailable
    """
    client = _require_client()
    try:
        client.storage.from_(bucket).upload(
            path, content, {"content-type": content_type, "upsert": "true"}
        )
        url = client.storage.from_(bucket).get_public_url(path)
    except Exception as exc:
        logger.error("Upload to %s/%s failed: %s", bucket, path, exc)
        raise ExternalServiceError(
            f"Upload failed: {exc}", details={"bucket": bucket, "path": path}
        ) from exc
    logger.info("Uploaded %d bytes to %s/%s", len(content), bucket, path)
    return url
