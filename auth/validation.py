"""Registration input checks.

Emails are normalized (stripped and lower-cased) before they are stored or
looked up, so ``Alice@Example.com`` and ``alice@example.com`` are one account.
"""

from __future__ import annotations

import re

from auth.config import AuthConfig
from auth.constants import AuthErrorDetails

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
SPECIAL_PATTERN = re.compile(r"[^a-zA-Z0-9]")

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72


def normalize_email(email: str) -> str:
    return email.strip().lower()


def email_errors(email: str) -> list[str]:
    if not EMAIL_PATTERN.match(normalize_email(email)):
        return [AuthErrorDetails.EMAIL_INVALID.value]
    return []


def password_errors(password: str, config: AuthConfig) -> list[str]:
    """Return one message per password rule that ``password`` breaks."""
    if not password:
        return [AuthErrorDetails.PASSWORD_REQUIRED.value]

    errors: list[str] = []
    if len(password) < config.PASSWORD_MIN_LENGTH:
        errors.append(
            AuthErrorDetails.PASSWORD_TOO_SHORT.value.format(min_length=config.PASSWORD_MIN_LENGTH)
        )
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        errors.append(AuthErrorDetails.PASSWORD_TOO_LONG.value)
    if config.PASSWORD_REQUIRE_UPPERCASE and not re.search(r"[A-Z]", password):
        errors.append(AuthErrorDetails.PASSWORD_MISSING_UPPERCASE.value)
    if config.PASSWORD_REQUIRE_LOWERCASE and not re.search(r"[a-z]", password):
        errors.append(AuthErrorDetails.PASSWORD_MISSING_LOWERCASE.value)
    if config.PASSWORD_REQUIRE_DIGIT and not re.search(r"[0-9]", password):
        errors.append(AuthErrorDetails.PASSWORD_MISSING_NUMBER.value)
    if config.PASSWORD_REQUIRE_SPECIAL and not SPECIAL_PATTERN.search(password):
        errors.append(AuthErrorDetails.PASSWORD_MISSING_SPECIAL.value)
    return errors


def registration_errors(email: str, password: str, config: AuthConfig) -> list[str]:
    return email_errors(email) + password_errors(password, config)
