"""Core auth service: register, login, refresh and logout."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from auth.config import AuthConfig
from auth.constants import AuthErrorDetails
from auth.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    TokenError,
    TokenExpiredError,
    TransientError,
    UnauthenticatedError,
    ValidationFailedError,
)
from auth.interfaces.refresh_token_store import RefreshTokenStore
from auth.interfaces.user_store import UserStore
from auth.security import TokenCodec, TokenKind, hash_password
from auth.services.credential_service import CredentialVerifier
from auth.services.timeouts import bounded
from auth.validation import normalize_email, registration_errors

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class AuthService:
    """Issues, rotates and revokes access/refresh token pairs.

    A refresh token can be exchanged only while it verifies and is still in
    its owner's ledger entry. Rotation goes through the store's atomic
    ``replace``, so of two racing refreshes on one token exactly one wins.
    """

    def __init__(
        self,
        user_store: UserStore,
        refresh_token_store: RefreshTokenStore,
        credential_verifier: CredentialVerifier,
        token_codec: TokenCodec,
        config: AuthConfig,
    ) -> None:
        self._users = user_store
        self._tokens = refresh_token_store
        self._credentials = credential_verifier
        self._codec = token_codec
        self._config = config

    async def _call(self, awaitable: Awaitable[T], operation: str) -> T:
        return await bounded(awaitable, self._config.STORE_TIMEOUT_SECONDS, operation)

    async def register(self, email: str, password: str) -> TokenPair:
        errors = registration_errors(email, password, self._config)
        if errors:
            raise ValidationFailedError(errors)

        email = normalize_email(email)
        existing = await self._call(self._users.get_by_email(email), "get_by_email")
        if existing:
            raise ConflictError(AuthErrorDetails.USER_ALREADY_EXISTS)

        hashed = await asyncio.to_thread(
            hash_password, password, self._config.PASSWORD_HASH_ROUNDS
        )
        # A concurrent register for the same email surfaces here as ConflictError.
        user = await self._call(self._users.create_user(email, hashed), "create_user")
        logger.info("Registered user %s", user["id"])
        return await self._issue_pair(str(user["id"]))

    async def login(self, email: str, password: str) -> TokenPair:
        try:
            user_id = await self._credentials.verify(email, password)
        except InvalidCredentialsError as exc:
            logger.info("Login failed: %s", exc.reason)
            raise UnauthenticatedError(AuthErrorDetails.INVALID_CREDENTIALS) from None

        await self._prune_expired(user_id)
        return await self._issue_pair(user_id)

    async def refresh(self, refresh_token: str | None) -> TokenPair:
        if not refresh_token:
            raise self._refresh_failure()

        try:
            claims = self._codec.verify(refresh_token, TokenKind.REFRESH)
        except TokenExpiredError as exc:
            logger.info("Refresh rejected: expired")
            if exc.subject_id:
                await self._call(self._tokens.remove(exc.subject_id, refresh_token), "remove")
            raise self._refresh_failure() from None
        except TokenError as exc:
            logger.info("Refresh rejected: %s", exc.reason)
            raise self._refresh_failure() from None

        user_id = claims.subject_id
        user = await self._call(self._users.get_by_id(user_id), "get_by_id")
        if not user:
            logger.info("Refresh rejected: unknown subject")
            raise self._refresh_failure()

        access_token = self._codec.issue_access(user_id)
        new_refresh = self._codec.issue(user_id, TokenKind.REFRESH)
        rotated = await self._call(
            self._tokens.replace(user_id, refresh_token, new_refresh.token, new_refresh.expires_at),
            "replace",
        )
        if not rotated:
            logger.warning("Refresh token replay or lost rotation race for user %s", user_id)
            raise self._refresh_failure()

        await self._prune_expired(user_id)
        return TokenPair(access_token=access_token, refresh_token=new_refresh.token)

    async def logout(self, user_id: str, refresh_token: str | None) -> None:
        """Revoke ``refresh_token`` for ``user_id``; never fails."""
        if not refresh_token:
            return
        try:
            removed = await self._call(self._tokens.remove(user_id, refresh_token), "remove")
        except TransientError:
            logger.warning("Failed to remove refresh token for user %s", user_id)
            return
        if not removed:
            logger.debug("Logout for user %s: token already gone", user_id)

    async def get_user(self, user_id: str) -> dict | None:
        return await self._call(self._users.get_by_id(user_id), "get_by_id")

    async def _issue_pair(self, user_id: str) -> TokenPair:
        access_token = self._codec.issue_access(user_id)
        refresh = self._codec.issue(user_id, TokenKind.REFRESH)
        await self._call(self._tokens.add(user_id, refresh.token, refresh.expires_at), "add")
        return TokenPair(access_token=access_token, refresh_token=refresh.token)

    async def _prune_expired(self, user_id: str) -> None:
        removed = await self._call(
            self._tokens.remove_expired(user_id, self._codec.now()), "remove_expired"
        )
        if removed:
            logger.debug("Pruned %d expired refresh tokens for user %s", removed, user_id)

    @staticmethod
    def _refresh_failure() -> UnauthenticatedError:
        return UnauthenticatedError(AuthErrorDetails.REFRESH_TOKEN_INVALID)
