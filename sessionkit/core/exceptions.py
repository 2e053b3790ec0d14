from __future__ import annotations


class SessionKitError(Exception):
    """Base exception for all sessionkit errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(SessionKitError):
    status_code = 400
    error_code = "VALIDATION_FAILED"


class ConflictError(SessionKitError):
    status_code = 400
    error_code = "CONFLICT"


class AuthError(SessionKitError):
    status_code = 403
    error_code = "AUTH_FAILED"


class InvalidCredentialsError(AuthError):
    status_code = 400
    error_code = "INVALID_CREDENTIALS"


class UserNotFoundError(AuthError):
    status_code = 404
    error_code = "USER_NOT_FOUND"


class TokenMissingError(AuthError):
    status_code = 401
    error_code = "TOKEN_MISSING"


class ServerError(SessionKitError):
    status_code = 500
    error_code = "INTERNAL_ERROR"


class InvalidCookieNameError(SessionKitError):
    """Raised client-side when a cookie name cannot be serialized."""

    status_code = 400
    error_code = "INVALID_COOKIE_NAME"


_HTTP_ERRORS: tuple[type[SessionKitError], ...] = (
    ValidationError,
    ConflictError,
    AuthError,
    InvalidCredentialsError,
    UserNotFoundError,
    TokenMissingError,
    ServerError,
)


def error_for_code(error_code: str | None, default: type[SessionKitError]) -> type[SessionKitError]:
    """Map an error_code from a response body back to its exception class."""
    for cls in _HTTP_ERRORS:
        if cls.error_code == error_code:
            return cls
    return default
