"""
FastAPI application for the session authentication service.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from auth.config import AuthConfig
from auth.dependencies import build_stores
from auth.interfaces.refresh_token_store import RefreshTokenStore
from auth.interfaces.user_store import UserStore
from auth.security import Clock, TokenCodec
from auth.services.access_guard import AccessGuard
from auth.services.auth_service import AuthService
from auth.services.credential_service import CredentialVerifier

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    logger.info("Auth service starting (store=%s)", app.state.auth_config.AUTH_STORE)
    yield
    logger.info("Auth service shutting down")


def create_app(
    config: AuthConfig | None = None,
    user_store: UserStore | None = None,
    token_store: RefreshTokenStore | None = None,
    clock: Clock = time.time,
) -> FastAPI:
    """Build the application; stores default to the ones selected by ``AUTH_STORE``."""
    if config is None:
        config = AuthConfig.from_env()
        configure_logging(config.LOG_LEVEL)

    if user_store is None or token_store is None:
        default_users, default_tokens = build_stores(config)
        user_store = user_store or default_users
        token_store = token_store or default_tokens

    codec = TokenCodec(config, clock=clock)
    verifier = CredentialVerifier(user_store, config)

    app = FastAPI(
        title="Auth API",
        description="Access/refresh token session service",
        lifespan=lifespan,
    )
    app.state.auth_config = config
    app.state.auth_service = AuthService(user_store, token_store, verifier, codec, config)
    app.state.access_guard = AccessGuard(codec)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])

    @app.get("/health")
    async def health():
        """Health check."""
        return {"status": "ok"}

    return app


def main() -> None:
    uvicorn.run("api.main:create_app", factory=True, host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
