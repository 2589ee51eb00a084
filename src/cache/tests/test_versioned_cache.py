import json
import random

import pytest

from src.cache.tests.inmemory_backend import BrokenCacheBackend, InMemoryCacheBackend
from src.cache.ttl_cache import TTLCache
from src.cache.versioned import VersionedCache, with_jitter


class CountingFetcher:
    def __init__(self, value):
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        return self.value


@pytest.fixture
def backend():
    return InMemoryCacheBackend()


@pytest.fixture
def cache(backend):
    return VersionedCache(backend=backend, namespace="wg", rng=random.Random(7))


async def test_cache_json_reads_through_then_hits(cache, backend):
    fetcher = CountingFetcher({"rows": [1, 2, 3]})

    first = await cache.cache_json("invitations:list:page=1", 120, fetcher)
    second = await cache.cache_json("invitations:list:page=1", 120, fetcher)

    assert first == second == {"rows": [1, 2, 3]}
    assert fetcher.calls == 1
    assert json.loads(backend.store["wg:v1:invitations:list:page=1"]) == {"rows": [1, 2, 3]}


async def test_bump_namespace_version_orphans_previous_entries(cache, backend):
    fetcher = CountingFetcher(["a"])
    await cache.cache_json("guests:list:page=1", 120, fetcher)

    new_version = await cache.bump_namespace_version()
    await cache.cache_json("guests:list:page=1", 120, fetcher)

    assert new_version == "2"
    assert fetcher.calls == 2
    # old entry was never deleted, only orphaned
    assert "wg:v1:guests:list:page=1" in backend.store
    assert "wg:v2:guests:list:page=1" in backend.store
    assert backend.deleted == []


async def test_version_is_cached_in_process():
    backend = InMemoryCacheBackend()
    now = [0.0]
    cache = VersionedCache(backend=backend, version_cache=TTLCache(5, clock=lambda: now[0]))

    await cache.current_version()
    await cache.current_version()
    assert backend.get_calls.count("wg:version") == 1

    now[0] = 6.0
    await cache.current_version()
    assert backend.get_calls.count("wg:version") == 2


async def test_cache_fails_open_when_backend_is_down():
    cache = VersionedCache(backend=BrokenCacheBackend())
    fetcher = CountingFetcher({"ok": True})

    assert await cache.cache_json("guests:list", 120, fetcher) == {"ok": True}
    assert await cache.cache_json("guests:list", 120, fetcher) == {"ok": True}
    assert fetcher.calls == 2
    assert await cache.bump_namespace_version() == "1"


async def test_fetcher_errors_are_not_swallowed(cache):
    async def failing():
        raise LookupError("db gone")

    with pytest.raises(LookupError):
        await cache.cache_json("guests:list", 120, failing)


async def test_invalidate_keys_deletes_current_version_entries(cache, backend):
    await cache.cache_json("guests:detail:1", 120, CountingFetcher(1))
    await cache.cache_json("guests:detail:2", 120, CountingFetcher(2))

    await cache.invalidate_keys("guests:detail:1")

    assert "wg:v1:guests:detail:1" not in backend.store
    assert "wg:v1:guests:detail:2" in backend.store


async def test_entries_are_written_with_jittered_ttl(cache, backend):
    await cache.cache_json("k", 120, CountingFetcher(1))

    assert 100 <= backend.ttls["wg:v1:k"] <= 140


def test_with_jitter_has_a_floor():
    rng = random.Random(1)
    assert all(with_jitter(10, 20, rng) == 30 for _ in range(50))
    assert all(100 <= with_jitter(120, 20, rng) <= 140 for _ in range(50))
