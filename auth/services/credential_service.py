"""Email/password verification."""

from __future__ import annotations

import asyncio
import secrets

from auth.config import AuthConfig
from auth.exceptions import PasswordMismatchError, UserNotFoundError
from auth.interfaces.user_store import UserStore
from auth.security import hash_password, verify_password
from auth.services.timeouts import bounded
from auth.validation import normalize_email


class CredentialVerifier:
    def __init__(self, user_store: UserStore, config: AuthConfig) -> None:
        self._users = user_store
        self._timeout = config.STORE_TIMEOUT_SECONDS
        # Compared against when the email is unknown so both failure paths
        # spend one bcrypt check.
        self._dummy_hash = hash_password(
            secrets.token_urlsafe(16), rounds=config.PASSWORD_HASH_ROUNDS
        )

    async def verify(self, email: str, password: str) -> str:
        """Return the user id for a matching email/password pair.

        Raises ``UserNotFoundError`` or ``PasswordMismatchError``; callers
        outside the auth service should only ever see the generic
        ``InvalidCredentialsError`` base.
        """
        user = await bounded(
            self._users.get_by_email(normalize_email(email)), self._timeout, "get_by_email"
        )
        if not user:
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            raise UserNotFoundError()

        if not await asyncio.to_thread(verify_password, password, user["hashed_password"]):
            raise PasswordMismatchError()

        return str(user["id"])
