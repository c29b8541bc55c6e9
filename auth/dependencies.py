"""Auth dependency helpers."""

from __future__ import annotations

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.config import AuthConfig
from auth.interfaces.refresh_token_store import RefreshTokenStore
from auth.interfaces.user_store import UserStore
from auth.services.access_guard import AccessGuard
from auth.services.auth_service import AuthService
from auth.stores.memory_store import MemoryRefreshTokenStore, MemoryUserStore
from auth.stores.postgres_store import PostgresRefreshTokenStore, PostgresUserStore
from auth.stores.sqlite_store import SQLiteRefreshTokenStore, SQLiteUserStore
from db.engine import create_db_engine, create_session_factory, init_schema

bearer_scheme = HTTPBearer(auto_error=False)


def build_stores(config: AuthConfig) -> tuple[UserStore, RefreshTokenStore]:
    """Create the user store and refresh-token store selected by AUTH_STORE."""
    if config.AUTH_STORE == "postgres":
        engine = create_db_engine(config.DATABASE_URL, timeout=config.STORE_TIMEOUT_SECONDS)
        init_schema(engine)
        session_factory = create_session_factory(engine)
        return PostgresUserStore(session_factory), PostgresRefreshTokenStore(session_factory)
    if config.AUTH_STORE == "sqlite":
        return (
            SQLiteUserStore(config.AUTH_DB_FILE, busy_timeout=config.STORE_TIMEOUT_SECONDS),
            SQLiteRefreshTokenStore(config.AUTH_DB_FILE, busy_timeout=config.STORE_TIMEOUT_SECONDS),
        )
    return MemoryUserStore(), MemoryRefreshTokenStore()


def get_config(request: Request) -> AuthConfig:
    return request.app.state.auth_config


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_access_guard(request: Request) -> AccessGuard:
    return request.app.state.access_guard


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    guard: AccessGuard = Depends(get_access_guard),
) -> str:
    """Subject id of the bearer access token; 401 when absent, 403 when invalid."""
    token = credentials.credentials if credentials else None
    return guard.authenticate(token)


def set_refresh_cookie(response: Response, refresh_token: str, config: AuthConfig) -> None:
    response.set_cookie(
        key=config.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=config.refresh_token_ttl_seconds,
        path=config.REFRESH_COOKIE_PATH,
        domain=config.COOKIE_DOMAIN,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.COOKIE_SAMESITE,
    )


def clear_refresh_cookie(response: Response, config: AuthConfig) -> None:
    response.delete_cookie(
        key=config.REFRESH_COOKIE_NAME,
        path=config.REFRESH_COOKIE_PATH,
        domain=config.COOKIE_DOMAIN,
        httponly=True,
        secure=config.cookie_secure,
        samesite=config.COOKIE_SAMESITE,
    )
