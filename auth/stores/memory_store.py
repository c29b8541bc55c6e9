"""In-memory auth stores."""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict
from typing import Any
from uuid import uuid4

from auth.exceptions import ConflictError


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_email: dict[str, dict[str, Any]] = {}
        self._users_by_id: dict[str, dict[str, Any]] = {}

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user = self._users_by_email.get(email)
            return dict(user) if user else None

    async def get_by_id(self, user_id: str) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            return dict(user) if user else None

    async def create_user(self, email: str, hashed_password: str) -> dict:
        async with self._lock:
            if email in self._users_by_email:
                raise ConflictError()
            payload = {
                "id": uuid4().hex,
                "email": email,
                "hashed_password": hashed_password,
                "created_at": int(time.time()),
            }
            self._users_by_email[email] = payload
            self._users_by_id[payload["id"]] = payload
            return dict(payload)


class MemoryRefreshTokenStore:
    """Ledger kept in process memory, serialized per user.

    Locks are only created for users that have an entry, so lookups for
    unknown ids leave no state behind.
    """

    def __init__(self) -> None:
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        # user_id -> {token: expires_at}
        self._ledger: dict[str, dict[str, int]] = {}

    async def add(self, user_id: str, token: str, expires_at: int) -> None:
        async with self._locks[user_id]:
            self._ledger.setdefault(user_id, {})[token] = expires_at

    async def remove(self, user_id: str, token: str) -> bool:
        if user_id not in self._ledger:
            return False
        async with self._locks[user_id]:
            return self._ledger[user_id].pop(token, None) is not None

    async def contains(self, user_id: str, token: str) -> bool:
        if user_id not in self._ledger:
            return False
        async with self._locks[user_id]:
            return token in self._ledger[user_id]

    async def replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        if user_id not in self._ledger:
            return False
        async with self._locks[user_id]:
            entry = self._ledger[user_id]
            if old not in entry:
                return False
            del entry[old]
            entry[new] = expires_at
            return True

    async def list_tokens(self, user_id: str) -> list[str]:
        if user_id not in self._ledger:
            return []
        async with self._locks[user_id]:
            return list(self._ledger[user_id])

    async def remove_expired(self, user_id: str, now: int) -> int:
        if user_id not in self._ledger:
            return 0
        async with self._locks[user_id]:
            entry = self._ledger[user_id]
            expired = [token for token, expires_at in entry.items() if expires_at <= now]
            for token in expired:
                del entry[token]
            return len(expired)
