"""Security utilities for auth: password hashing and the token codec."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from auth.config import AuthConfig
from auth.exceptions import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using bcrypt's constant-time check."""
    try:
        password_bytes = password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Malformed hash or an over-long password.
        return False


class TokenKind(StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: int


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    kind: TokenKind
    issued_at: int
    expires_at: int
    jti: str


class TokenCodec:
    """Signs and verifies access and refresh tokens.

    Each kind has its own secret, so a leaked access secret cannot mint
    refresh tokens and vice versa. Expiry is checked against ``clock``
    rather than the JWT library's wall clock.
    """

    def __init__(self, config: AuthConfig, clock: Clock = time.time) -> None:
        self._algorithm = config.JWT_ALGORITHM
        self._secrets = {
            TokenKind.ACCESS: config.ACCESS_TOKEN_SECRET,
            TokenKind.REFRESH: config.REFRESH_TOKEN_SECRET,
        }
        self._ttls = {
            TokenKind.ACCESS: config.access_token_ttl_seconds,
            TokenKind.REFRESH: config.refresh_token_ttl_seconds,
        }
        self._clock = clock

    def now(self) -> int:
        return int(self._clock())

    def issue_access(self, subject_id: str) -> str:
        return self.issue(subject_id, TokenKind.ACCESS).token

    def issue_refresh(self, subject_id: str) -> str:
        return self.issue(subject_id, TokenKind.REFRESH).token

    def issue(self, subject_id: str, kind: TokenKind) -> IssuedToken:
        now = self.now()
        expires_at = now + self._ttls[kind]
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "type": kind.value,
            "iat": now,
            "exp": expires_at,
            "jti": uuid4().hex,
        }
        token = jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str, kind: TokenKind) -> TokenClaims:
        """Decode ``token`` as ``kind``.

        Raises:
            InvalidTokenError: bad signature, malformed token or wrong kind.
            TokenExpiredError: signature valid but ``exp`` has passed.
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("%s token rejected: %s", kind.value, exc)
            raise InvalidTokenError() from exc

        subject_id = payload.get("sub")
        expires_at = payload.get("exp")
        if (
            payload.get("type") != kind.value
            or not isinstance(subject_id, str)
            or not subject_id
            or not isinstance(expires_at, int)
        ):
            raise InvalidTokenError()

        if self._clock() >= expires_at:
            raise TokenExpiredError(subject_id=subject_id)

        return TokenClaims(
            subject_id=subject_id,
            kind=kind,
            issued_at=int(payload.get("iat") or 0),
            expires_at=expires_at,
            jti=str(payload.get("jti") or ""),
        )
