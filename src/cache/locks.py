import logging

from src.cache.backends import CacheBackend

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TTL_SECONDS = 300


class LockManager:
    """Named mutual-exclusion locks with an expiry, stored in the cache backend."""

    def __init__(self, backend: CacheBackend, namespace: str = "wg"):
        self.backend = backend
        self.namespace = namespace

    def lock_key(self, name: str) -> str:
        return f"{self.namespace}:locks:{name}"

    async def acquire(self, name: str, ttl_seconds: int = DEFAULT_LOCK_TTL_SECONDS) -> bool:
        try:
            return await self.backend.set_if_absent(self.lock_key(name), "1", ttl_seconds)
        except Exception as e:
            logger.warning(f"Could not acquire lock {name}: {e}")
            return False

    async def release(self, name: str) -> None:
        try:
            await self.backend.delete(self.lock_key(name))
        except Exception as e:
            logger.warning(f"Could not release lock {name}, it will expire on its own: {e}")

    async def is_held(self, name: str) -> bool:
        try:
            return await self.backend.get(self.lock_key(name)) is not None
        except Exception as e:
            logger.warning(f"Could not read lock {name}: {e}")
            return False
