"""Access-token gate for protected operations."""

from __future__ import annotations

import logging

from auth.constants import AuthErrorDetails
from auth.exceptions import ForbiddenError, TokenError, UnauthenticatedError
from auth.security import TokenCodec, TokenKind

logger = logging.getLogger(__name__)


class AccessGuard:
    """Resolves a bearer access token to its subject id.

    Access tokens are stateless: there is no ledger lookup, so a token stays
    usable until it expires.
    """

    def __init__(self, token_codec: TokenCodec) -> None:
        self._codec = token_codec

    def authenticate(self, token: str | None) -> str:
        if not token:
            raise UnauthenticatedError(AuthErrorDetails.TOKEN_MISSING)
        try:
            claims = self._codec.verify(token, TokenKind.ACCESS)
        except TokenError as exc:
            logger.info("Access token rejected: %s", exc.reason)
            raise ForbiddenError(AuthErrorDetails.TOKEN_INVALID) from None
        return claims.subject_id
