"""PostgreSQL auth stores using SQLAlchemy."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from auth.exceptions import ConflictError, TransientError
from db.models.auth import RefreshToken
from db.models.user import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostgresStoreBase:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as exc:
            logger.warning("Database store unavailable: %s", exc.__class__.__name__)
            raise TransientError() from exc


class PostgresUserStore(PostgresStoreBase):
    """User store backed by PostgreSQL."""

    async def get_by_email(self, email: str) -> dict | None:
        return await self._run(self._get_one, User.email == email)

    async def get_by_id(self, user_id: str) -> dict | None:
        return await self._run(self._get_one, User.id == user_id)

    async def create_user(self, email: str, hashed_password: str) -> dict:
        return await self._run(self._create_user, email, hashed_password)

    def _get_one(self, criterion) -> dict | None:
        with self._session_factory() as db:
            user = db.execute(select(User).where(criterion)).scalar_one_or_none()
            return user.to_dict() if user else None

    def _create_user(self, email: str, hashed_password: str) -> dict:
        with self._session_factory() as db:
            user = User(id=uuid4().hex, email=email, hashed_password=hashed_password)
            db.add(user)
            try:
                db.commit()
            except IntegrityError as exc:
                raise ConflictError() from exc
            db.refresh(user)
            return user.to_dict()


class PostgresRefreshTokenStore(PostgresStoreBase):
    """Refresh-token ledger backed by PostgreSQL.

    Rotation deletes the old row and inserts the new one inside a single
    transaction. A competing rotation blocks on the row lock taken by the
    DELETE and then sees zero affected rows.
    """

    async def add(self, user_id: str, token: str, expires_at: int) -> None:
        await self._run(self._add, user_id, token, expires_at)

    async def remove(self, user_id: str, token: str) -> bool:
        return await self._run(self._remove, user_id, token)

    async def contains(self, user_id: str, token: str) -> bool:
        return await self._run(self._contains, user_id, token)

    async def replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        return await self._run(self._replace, user_id, old, new, expires_at)

    async def list_tokens(self, user_id: str) -> list[str]:
        return await self._run(self._list_tokens, user_id)

    async def remove_expired(self, user_id: str, now: int) -> int:
        return await self._run(self._remove_expired, user_id, now)

    def _add(self, user_id: str, token: str, expires_at: int) -> None:
        with self._session_factory() as db:
            existing = db.get(RefreshToken, (user_id, token))
            if existing is None:
                db.add(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))
                db.commit()

    def _remove(self, user_id: str, token: str) -> bool:
        with self._session_factory() as db, db.begin():
            result = db.execute(
                delete(RefreshToken).where(
                    RefreshToken.user_id == user_id, RefreshToken.token == token
                )
            )
            return result.rowcount == 1

    def _contains(self, user_id: str, token: str) -> bool:
        with self._session_factory() as db:
            return db.get(RefreshToken, (user_id, token)) is not None

    def _replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        with self._session_factory() as db, db.begin():
            result = db.execute(
                delete(RefreshToken).where(
                    RefreshToken.user_id == user_id, RefreshToken.token == old
                )
            )
            if result.rowcount != 1:
                return False
            db.add(RefreshToken(user_id=user_id, token=new, expires_at=expires_at))
            return True

    def _list_tokens(self, user_id: str) -> list[str]:
        with self._session_factory() as db:
            rows = db.execute(
                select(RefreshToken.token)
                .where(RefreshToken.user_id == user_id)
                .order_by(RefreshToken.created_at)
            ).scalars()
            return list(rows)

    def _remove_expired(self, user_id: str, now: int) -> int:
        with self._session_factory() as db, db.begin():
            result = db.execute(
                delete(RefreshToken).where(
                    RefreshToken.user_id == user_id, RefreshToken.expires_at <= now
                )
            )
            return result.rowcount
