"""Auth configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def load_env_file() -> None:
    """Load a .env file from the project root, falling back to the cwd."""
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
    else:
        load_dotenv(override=False)


@dataclass(frozen=True)
class AuthConfig:
    """Configuration values for auth flows.

    Built once at startup and handed to every component that needs it.
    """

    ACCESS_TOKEN_SECRET: str
    REFRESH_TOKEN_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    JWT_ALGORITHM: str = "HS256"

    PASSWORD_HASH_ROUNDS: int = 12
    PASSWORD_MIN_LENGTH: int = 8
    PASSWORD_REQUIRE_UPPERCASE: bool = True
    PASSWORD_REQUIRE_LOWERCASE: bool = True
    PASSWORD_REQUIRE_DIGIT: bool = True
    PASSWORD_REQUIRE_SPECIAL: bool = True

    ENVIRONMENT: str = "development"
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    COOKIE_DOMAIN: str | None = None
    REFRESH_COOKIE_NAME: str = "jid"
    REFRESH_COOKIE_PATH: str = "/api/auth"

    # Auth store: "memory" (tests/dev), "sqlite" (single node) or "postgres"
    AUTH_STORE: str = "memory"
    AUTH_DB_FILE: str = "auth.db"
    DATABASE_URL: str | None = None
    STORE_TIMEOUT_SECONDS: float = 5.0

    CORS_ORIGINS: tuple[str, ...] = field(default=("http://localhost:5173",))
    LOG_LEVEL: str = "INFO"

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def cookie_secure(self) -> bool:
        # Outside local development the refresh cookie is always HTTPS-only.
        return self.COOKIE_SECURE or not self.is_development

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AuthConfig":
        """Build a config from environment variables (and .env when reading os.environ)."""
        if env is None:
            load_env_file()
            env = os.environ

        config = cls(
            ACCESS_TOKEN_SECRET=env.get("ACCESS_TOKEN_SECRET", ""),
            REFRESH_TOKEN_SECRET=env.get("REFRESH_TOKEN_SECRET", ""),
            ACCESS_TOKEN_EXPIRE_MINUTES=int(env.get("ACCESS_TOKEN_EXPIRE_MINUTES", "15")),
            REFRESH_TOKEN_EXPIRE_DAYS=int(env.get("REFRESH_TOKEN_EXPIRE_DAYS", "7")),
            JWT_ALGORITHM=env.get("JWT_ALGORITHM", "HS256"),
            PASSWORD_HASH_ROUNDS=int(env.get("PASSWORD_HASH_ROUNDS", "12")),
            PASSWORD_MIN_LENGTH=int(env.get("PASSWORD_MIN_LENGTH", "8")),
            PASSWORD_REQUIRE_UPPERCASE=_parse_bool(env.get("PASSWORD_REQUIRE_UPPERCASE"), True),
            PASSWORD_REQUIRE_LOWERCASE=_parse_bool(env.get("PASSWORD_REQUIRE_LOWERCASE"), True),
            PASSWORD_REQUIRE_DIGIT=_parse_bool(env.get("PASSWORD_REQUIRE_DIGIT"), True),
            PASSWORD_REQUIRE_SPECIAL=_parse_bool(env.get("PASSWORD_REQUIRE_SPECIAL"), True),
            ENVIRONMENT=env.get("ENVIRONMENT", "development").strip().lower(),
            COOKIE_SECURE=_parse_bool(env.get("COOKIE_SECURE"), False),
            COOKIE_SAMESITE=env.get("COOKIE_SAMESITE", "lax"),
            COOKIE_DOMAIN=env.get("COOKIE_DOMAIN") or None,
            REFRESH_COOKIE_NAME=env.get("REFRESH_COOKIE_NAME", "jid"),
            REFRESH_COOKIE_PATH=env.get("REFRESH_COOKIE_PATH", "/api/auth"),
            AUTH_STORE=env.get("AUTH_STORE", "memory").strip().lower(),
            AUTH_DB_FILE=env.get("AUTH_DB_FILE", "auth.db"),
            DATABASE_URL=env.get("DATABASE_URL") or None,
            STORE_TIMEOUT_SECONDS=float(env.get("STORE_TIMEOUT_SECONDS", "5")),
            CORS_ORIGINS=_parse_list(env.get("CORS_ORIGINS"), ("http://localhost:5173",)),
            LOG_LEVEL=env.get("LOG_LEVEL", "INFO").upper(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate required configuration."""
        missing = [
            name
            for name in ("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_hex(64))\""
            )
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        if self.ACCESS_TOKEN_EXPIRE_MINUTES < 1:
            raise ValueError("Access token expiration must be at least 1 minute")
        if self.REFRESH_TOKEN_EXPIRE_DAYS < 1:
            raise ValueError("Refresh token expiration must be at least 1 day")
        if not 4 <= self.PASSWORD_HASH_ROUNDS <= 31:
            raise ValueError("PASSWORD_HASH_ROUNDS must be between 4 and 31")
        if self.COOKIE_SAMESITE not in {"lax", "strict", "none"}:
            raise ValueError("COOKIE_SAMESITE must be one of: lax, strict, none")
        if self.AUTH_STORE not in {"memory", "sqlite", "postgres"}:
            raise ValueError("AUTH_STORE must be one of: memory, sqlite, postgres")
        if self.AUTH_STORE == "postgres" and not self.DATABASE_URL:
            raise ValueError("DATABASE_URL is required when AUTH_STORE=postgres")
        if self.STORE_TIMEOUT_SECONDS <= 0:
            raise ValueError("STORE_TIMEOUT_SECONDS must be positive")
        if not self.is_development and min(
            len(self.ACCESS_TOKEN_SECRET), len(self.REFRESH_TOKEN_SECRET)
        ) < 32:
            raise ValueError("Token secrets must be at least 32 characters outside development")
