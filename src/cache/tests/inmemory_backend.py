from src.cache.backends import CacheBackend


class InMemoryCacheBackend(CacheBackend):
    """Dict-backed backend that records calls. TTLs are stored, not enforced."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.get_calls: list[str] = []
        self.deleted: list[str] = []

    async def get(self, key: str) -> str | None:
        self.get_calls.append(key)
        return self.store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        self.store[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.deleted.append(key)
            self.store.pop(key, None)

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        if key in self.store:
            return False
        await self.set(key, value, ttl_seconds)
        return True


class BrokenCacheBackend(CacheBackend):
    """Every call fails, as if the cache server were down."""

    async def get(self, key: str) -> str | None:
        raise ConnectionError("cache down")

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        raise ConnectionError("cache down")

    async def delete(self, *keys: str) -> None:
        raise ConnectionError("cache down")

    async def set_if_absent(self, key: str, value: str, ttl_seconds: int) -> bool:
        raise ConnectionError("cache down")
