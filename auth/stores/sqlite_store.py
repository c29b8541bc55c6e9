"""SQLite auth stores."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

from auth.exceptions import ConflictError, TransientError

logger = logging.getLogger(__name__)


class SQLiteStoreBase:
    def __init__(self, db_path: str, busy_timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._busy_timeout = busy_timeout
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        # Autocommit mode; multi-statement writes open their own transaction.
        connection = sqlite3.connect(
            self._db_path,
            timeout=self._busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        try:
            yield connection
        except sqlite3.OperationalError as exc:
            logger.warning("SQLite store unavailable: %s", exc)
            raise TransientError() from exc
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT UNIQUE NOT NULL,
                    hashed_password TEXT NOT NULL,
                    created_at INTEGER
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS refresh_tokens (
                    user_id TEXT NOT NULL,
                    token TEXT NOT NULL,
                    expires_at INTEGER NOT NULL,
                    created_at INTEGER,
                    PRIMARY KEY (user_id, token)
                )
                """
            )


class SQLiteUserStore(SQLiteStoreBase):
    async def get_by_email(self, email: str) -> dict | None:
        return await asyncio.to_thread(self._fetch_one, "SELECT * FROM users WHERE email = ?", email)

    async def get_by_id(self, user_id: str) -> dict | None:
        return await asyncio.to_thread(self._fetch_one, "SELECT * FROM users WHERE id = ?", user_id)

    async def create_user(self, email: str, hashed_password: str) -> dict:
        return await asyncio.to_thread(self._create_user, email, hashed_password)

    def _fetch_one(self, query: str, value: str) -> dict | None:
        with self._connect() as conn:
            row = conn.execute(query, (value,)).fetchone()
        return dict(row) if row else None

    def _create_user(self, email: str, hashed_password: str) -> dict:
        payload = {
            "id": uuid4().hex,
            "email": email,
            "hashed_password": hashed_password,
            "created_at": int(time.time()),
        }
        with self._connect() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, email, hashed_password, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (payload["id"], payload["email"], payload["hashed_password"], payload["created_at"]),
                )
            except sqlite3.IntegrityError as exc:
                raise ConflictError() from exc
        return payload


class SQLiteRefreshTokenStore(SQLiteStoreBase):
    async def add(self, user_id: str, token: str, expires_at: int) -> None:
        await asyncio.to_thread(self._add, user_id, token, expires_at)

    async def remove(self, user_id: str, token: str) -> bool:
        return await asyncio.to_thread(self._remove, user_id, token)

    async def contains(self, user_id: str, token: str) -> bool:
        return await asyncio.to_thread(self._contains, user_id, token)

    async def replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        return await asyncio.to_thread(self._replace, user_id, old, new, expires_at)

    async def list_tokens(self, user_id: str) -> list[str]:
        return await asyncio.to_thread(self._list_tokens, user_id)

    async def remove_expired(self, user_id: str, now: int) -> int:
        return await asyncio.to_thread(self._remove_expired, user_id, now)

    def _add(self, user_id: str, token: str, expires_at: int) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO refresh_tokens (user_id, token, expires_at, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, token, expires_at, int(time.time())),
            )

    def _remove(self, user_id: str, token: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM refresh_tokens WHERE user_id = ? AND token = ?",
                (user_id, token),
            )
        return cursor.rowcount == 1

    def _contains(self, user_id: str, token: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM refresh_tokens WHERE user_id = ? AND token = ?",
                (user_id, token),
            ).fetchone()
        return row is not None

    def _replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        with self._connect() as conn:
            # Takes the write lock up front so concurrent rotations queue here.
            conn.execute("BEGIN IMMEDIATE")
            try:
                cursor = conn.execute(
                    "DELETE FROM refresh_tokens WHERE user_id = ? AND token = ?",
                    (user_id, old),
                )
                if cursor.rowcount != 1:
                    conn.execute("ROLLBACK")
                    return False
                conn.execute(
                    """
                    INSERT INTO refresh_tokens (user_id, token, expires_at, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, new, expires_at, int(time.time())),
                )
                conn.execute("COMMIT")
                return True
            except sqlite3.Error:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def _list_tokens(self, user_id: str) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT token FROM refresh_tokens WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        return [row["token"] for row in rows]

    def _remove_expired(self, user_id: str, now: int) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM refresh_tokens WHERE user_id = ? AND expires_at <= ?",
                (user_id, now),
            )
        return cursor.rowcount
