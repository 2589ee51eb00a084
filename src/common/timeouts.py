import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], seconds: float, fallback: T, label: str) -> T:
    """Await with a time budget, returning ``fallback`` on timeout or error.

    Meant for pages that compose several independent fetches and can render
    with a partial result.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except TimeoutError:
        logger.warning(f"{label} timed out after {seconds}s, using fallback")
    except Exception as e:
        logger.warning(f"{label} failed, using fallback: {e}")
    return fallback
