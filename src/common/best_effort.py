"""Best-effort side effects.

Audit inserts, cache bumps, RSVP history rows, pass generation and
confirmation messages must never fail the operation that triggered them.
Running them through :func:`best_effort` turns any exception into an
inspectable :class:`BestEffortResult` and a warning log line.
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BestEffortResult(Generic[T]):
    label: str
    ok: bool
    value: T | None = None
    error: str | None = None


async def best_effort(label: str, awaitable: Awaitable[T]) -> BestEffortResult[T]:
    try:
        value = await awaitable
    except Exception as e:
        logger.warning(f"Best-effort task '{label}' failed: {e}")
        return BestEffortResult(label=label, ok=False, error=str(e))
    return BestEffortResult(label=label, ok=True, value=value)
