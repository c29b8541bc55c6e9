"""Shared helpers for the auth tests."""

from __future__ import annotations

import dataclasses

from auth.config import AuthConfig

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-0123456789abcdef"
STRONG_PASSWORD = "Str0ng!Pass"


def make_config(**overrides) -> AuthConfig:
    config = AuthConfig(
        ACCESS_TOKEN_SECRET=ACCESS_SECRET,
        REFRESH_TOKEN_SECRET=REFRESH_SECRET,
        PASSWORD_HASH_ROUNDS=4,
        ENVIRONMENT="development",
    )
    return dataclasses.replace(config, **overrides)


class FakeClock:
    """Settable clock for the token codec."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
