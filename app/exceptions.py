from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors the API layer knows how to render.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, provider info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Application error"
    default_code = "APPLICATION_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "SERVICE_VALIDATION_ERROR"


class NotFoundError(AppError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class UnauthorizedError(AppError):
    """Raised when authentication fails or no session is present."""

    http_status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ExternalServiceError(AppError):
    """Raised when a hosted provider (storage, auth, email) fails.

    http_status defaults to 502 but can be overridden per instance, e.g. the
    email report endpoints answer 500 when the provider rejects a send.
    """

    http_status = 502
    default_message = "External service error"
    default_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
    ):
        super().__init__(message, details, code)
        if http_status is not None:
            self.http_status = http_status
