from enum import StrEnum


class AuthErrorDetails(StrEnum):
    """Authentication related error messages."""

    PASSWORD_REQUIRED = "Password is required"
    PASSWORD_TOO_SHORT = "Password must be at least {min_length} characters long"
    PASSWORD_TOO_LONG = "Password must be at most 72 bytes long"
    PASSWORD_MISSING_UPPERCASE = "Password must contain at least one uppercase letter"
    PASSWORD_MISSING_LOWERCASE = "Password must contain at least one lowercase letter"
    PASSWORD_MISSING_NUMBER = "Password must contain at least one number"
    PASSWORD_MISSING_SPECIAL = "Password must contain at least one special character"
    EMAIL_INVALID = "Please provide a valid email address"

    USER_ALREADY_EXISTS = "User already exists"
    INVALID_CREDENTIALS = "Invalid credentials"

    TOKEN_MISSING = "Authentication required"
    TOKEN_INVALID = "Invalid or expired token"
    REFRESH_TOKEN_INVALID = "Invalid refresh token"


class GeneralErrorDetails(StrEnum):
    """General application error messages."""

    INTERNAL_SERVER_ERROR = "Internal server error"
    SERVICE_UNAVAILABLE = "Service temporarily unavailable"
    NOT_FOUND = "Resource not found"


LOGGED_OUT = "Logged out"
