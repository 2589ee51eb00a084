import json
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any

from src.cache.backends import CacheBackend
from src.cache.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1"
MIN_TTL_SECONDS = 30


def with_jitter(ttl_seconds: int, jitter_seconds: int = 20, rng: random.Random | None = None) -> int:
    """Spread expiry of keys written together, never below 30 seconds."""
    rng = rng or random
    return max(MIN_TTL_SECONDS, ttl_seconds + rng.randint(-jitter_seconds, jitter_seconds))


class VersionedCache:
    """Read-through JSON cache invalidated by bumping a namespace version.

    Physical keys look like ``{namespace}:v{version}:{logical key}``. Bumping
    the version makes every existing entry unreachable at once; orphaned
    entries simply expire through their TTL. Backend errors never reach the
    caller: reads fall back to the fetcher and writes are logged and dropped.
    """

    def __init__(
        self,
        backend: CacheBackend,
        namespace: str = "wg",
        version_cache: TTLCache[str] | None = None,
        jitter_seconds: int = 20,
        rng: random.Random | None = None,
    ):
        self.backend = backend
        self.namespace = namespace
        self.version_cache = version_cache or TTLCache(ttl_seconds=5)
        self.jitter_seconds = jitter_seconds
        self._rng = rng

    @property
    def version_key(self) -> str:
        return f"{self.namespace}:version"

    async def current_version(self) -> str:
        cached = self.version_cache.get(self.version_key)
        if cached is not None:
            return cached
        try:
            version = await self.backend.get(self.version_key) or DEFAULT_VERSION
        except Exception as e:
            logger.warning(f"Could not read cache version, assuming {DEFAULT_VERSION}: {e}")
            return DEFAULT_VERSION
        self.version_cache.set(self.version_key, version)
        return version

    def build_key(self, key_base: str, version: str) -> str:
        return f"{self.namespace}:v{version}:{key_base}"

    async def versioned_key(self, key_base: str) -> str:
        return self.build_key(key_base, await self.current_version())

    async def cache_json(
        self,
        key_base: str,
        ttl_seconds: int,
        fetcher: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            key = await self.versioned_key(key_base)
            cached = await self.backend.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key_base}, bypassing cache: {e}")
            return await fetcher()

        if cached is not None:
            try:
                return json.loads(cached)
            except ValueError:
                logger.warning(f"Discarding undecodable cache entry {key}")

        value = await fetcher()
        try:
            await self.backend.set(
                key,
                json.dumps(value, default=str),
                ttl_seconds=with_jitter(ttl_seconds, self.jitter_seconds, self._rng),
            )
        except Exception as e:
            logger.warning(f"Cache write failed for {key_base}: {e}")
        return value

    async def invalidate_keys(self, *key_bases: str) -> None:
        """Delete specific entries of the current version."""
        if not key_bases:
            return
        try:
            version = await self.current_version()
            await self.backend.delete(*(self.build_key(k, version) for k in key_bases))
        except Exception as e:
            logger.warning(f"Cache invalidation failed for {key_bases}: {e}")

    async def bump_namespace_version(self) -> str:
        """Orphan every cached entry by moving to the next version."""
        try:
            current = await self.backend.get(self.version_key) or DEFAULT_VERSION
            next_version = str(int(current) + 1)
            await self.backend.set(self.version_key, next_version)
        except Exception as e:
            logger.warning(f"Cache version bump failed: {e}")
            return DEFAULT_VERSION
        finally:
            self.version_cache.clear(self.version_key)
        logger.info(f"Cache namespace {self.namespace} bumped to v{next_version}")
        return next_version
