"""Bounded waits for network calls."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from playmate.steam.client import FetchTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded(operation: Awaitable[T], seconds: float, label: str = "operation") -> T:
    """Race ``operation`` against a ``seconds`` timer.

    Whichever finishes first wins. If the timer wins, the operation is
    cancelled and ``FetchTimeoutError`` is raised so callers can treat it
    like any other soft failure.
    """
    try:
        return await asyncio.wait_for(operation, timeout=seconds)
    except asyncio.TimeoutError as e:
        logger.warning("%s did not finish within %.1fs", label, seconds)
        raise FetchTimeoutError(f"Request timed out ({label})") from e
