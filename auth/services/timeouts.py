"""Bounded store calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from auth.exceptions import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a store call, turning a timeout into ``TransientError``."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Store call %s timed out after %.1fs", operation, timeout)
        raise TransientError() from exc
