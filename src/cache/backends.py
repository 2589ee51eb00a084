import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Key/value store behind the versioned cache and the lock helpers."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Atomically set ``key`` only if it does not exist. Returns whether it was set."""
        raise NotImplementedError


class RedisCacheBackend(CacheBackend):
    def __init__(self, url: str, client: redis.Redis | None = None):
        self._client = client or redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
        )

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if ttl_seconds:
            await self._client.setex(key, ttl_seconds, value)
        else:
            await self._client.set(key, value)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        return bool(await self._client.set(key, value, nx=True, ex=ttl_seconds))

    async def close(self) -> None:
        await self._client.aclose()


class NoOpCacheBackend(CacheBackend):
    """Used when no cache is configured: cached values are never stored.

    Keys taken with :meth:`set_if_absent` are still held in process until they
    expire or are deleted, so locks exclude each other on a single instance.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._held: dict[str, tuple[float, str]] = {}

    def _live(self, key: str) -> str | None:
        entry = self._held.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._held[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        pass

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._held.pop(key, None)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        if self._live(key) is not None:
            return False
        self._held[key] = (self._clock() + ttl_seconds, value)
        return True
