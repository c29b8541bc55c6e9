"""Refresh-token ledger interface.

One entry per user holding the set of refresh-token strings that may still
be exchanged for a new token pair.
"""

from __future__ import annotations

from typing import Protocol


class RefreshTokenStore(Protocol):
    async def add(self, user_id: str, token: str, expires_at: int) -> None:
        ...

    async def remove(self, user_id: str, token: str) -> bool:
        """Remove ``token``; returns False when it was not present."""
        ...

    async def contains(self, user_id: str, token: str) -> bool:
        ...

    async def replace(self, user_id: str, old: str, new: str, expires_at: int) -> bool:
        """Atomically swap ``old`` for ``new``.

        Returns False, leaving the entry untouched, when ``old`` is not
        present. Of two concurrent calls with the same ``old`` at most one
        returns True.
        """
        ...

    async def list_tokens(self, user_id: str) -> list[str]:
        ...

    async def remove_expired(self, user_id: str, now: int) -> int:
        """Drop tokens whose recorded expiry is at or before ``now``."""
        ...
