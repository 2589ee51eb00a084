from functools import lru_cache

from src.cache.backends import CacheBackend, NoOpCacheBackend, RedisCacheBackend
from src.cache.locks import LockManager
from src.cache.ttl_cache import TTLCache
from src.cache.versioned import VersionedCache
from src.config.settings import settings


@lru_cache
def get_cache_backend() -> CacheBackend:
    if settings.REDIS_URL:
        return RedisCacheBackend(settings.REDIS_URL)
    return NoOpCacheBackend()


@lru_cache
def get_versioned_cache() -> VersionedCache:
    return VersionedCache(
        backend=get_cache_backend(),
        namespace=settings.CACHE_NAMESPACE,
        version_cache=TTLCache(ttl_seconds=settings.CACHE_VERSION_TTL_SECONDS),
        jitter_seconds=settings.CACHE_JITTER_SECONDS,
    )


@lru_cache
def get_lock_manager() -> LockManager:
    return LockManager(backend=get_cache_backend(), namespace=settings.CACHE_NAMESPACE)


__all__ = [
    "CacheBackend",
    "LockManager",
    "TTLCache",
    "VersionedCache",
    "get_cache_backend",
    "get_lock_manager",
    "get_versioned_cache",
]
