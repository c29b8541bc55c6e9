"""Auth exceptions."""

from __future__ import annotations

from auth.constants import GeneralErrorDetails


class AuthException(Exception):
    """Base auth exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationFailedError(AuthException):
    """Malformed input; carries one message per offending field."""

    def __init__(self, errors: list[str]):
        super().__init__("Validation failed", status_code=400)
        self.errors = list(errors)


class ConflictError(AuthException):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message, status_code=400)


class UnauthenticatedError(AuthException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(UnauthenticatedError):
    """Wrong email or password. Subclasses exist for logging only."""

    reason = "invalid"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class UserNotFoundError(InvalidCredentialsError):
    reason = "not_found"


class PasswordMismatchError(InvalidCredentialsError):
    reason = "mismatch"


class TokenError(UnauthenticatedError):
    """Token failed verification."""

    reason = "invalid"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class InvalidTokenError(TokenError):
    reason = "bad_signature"


class TokenExpiredError(TokenError):
    reason = "expired"

    def __init__(self, message: str = "Token has expired", subject_id: str | None = None):
        super().__init__(message)
        self.subject_id = subject_id


class ForbiddenError(AuthException):
    def __init__(self, message: str = "Access forbidden"):
        super().__init__(message, status_code=403)


class NotFoundError(AuthException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class TransientError(AuthException):
    """Store failure or timeout; safe to retry."""

    def __init__(self, message: str = GeneralErrorDetails.SERVICE_UNAVAILABLE):
        super().__init__(message, status_code=503)


class InternalError(AuthException):
    def __init__(self, message: str = GeneralErrorDetails.INTERNAL_SERVER_ERROR):
        super().__init__(message, status_code=500)
