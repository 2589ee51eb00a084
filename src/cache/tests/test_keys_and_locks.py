from uuid import UUID

from src.cache.backends import NoOpCacheBackend
from src.cache.keys import guest_detail_key, guests_list_key, invitations_list_key
from src.cache.locks import LockManager
from src.cache.tests.inmemory_backend import BrokenCacheBackend, InMemoryCacheBackend

WEDDING_ID = UUID("6f0d1a3e-0000-4000-8000-000000000001")


def test_guests_list_key_is_normalised_and_sorted():
    key = guests_list_key(WEDDING_ID, page=2, q="  Smith ", vip=True)

    assert key == (
        "guests:list:page=2:pageSize=10:q=smith:sort=created_at:desc:vip=true"
        f":wedding={WEDDING_ID}"
    )


def test_guests_list_key_defaults_and_drops_empty_values():
    assert guests_list_key(WEDDING_ID) == guests_list_key(WEDDING_ID, page=1, page_size=10, q="", status=None)
    assert "status" not in guests_list_key(WEDDING_ID)


def test_invitations_list_key_differs_per_tenant():
    other = UUID("6f0d1a3e-0000-4000-8000-000000000002")
    assert invitations_list_key(WEDDING_ID) != invitations_list_key(other)


def test_detail_key():
    assert guest_detail_key(WEDDING_ID) == f"guests:detail:{WEDDING_ID}"


async def test_lock_is_exclusive_until_released():
    locks = LockManager(InMemoryCacheBackend(), namespace="wg")

    assert await locks.acquire("invite_code_backfill", ttl_seconds=300) is True
    assert await locks.is_held("invite_code_backfill") is True
    assert await locks.acquire("invite_code_backfill") is False

    await locks.release("invite_code_backfill")
    assert await locks.is_held("invite_code_backfill") is False
    assert await locks.acquire("invite_code_backfill") is True


async def test_lock_key_and_ttl():
    backend = InMemoryCacheBackend()
    await LockManager(backend, namespace="wg").acquire("job", ttl_seconds=60)

    assert backend.ttls == {"wg:locks:job": 60}


async def test_lock_acquire_fails_closed_when_backend_is_down():
    locks = LockManager(BrokenCacheBackend())

    assert await locks.acquire("job") is False
    assert await locks.is_held("job") is False


async def test_locks_still_exclude_without_redis():
    now = [0.0]
    backend = NoOpCacheBackend(clock=lambda: now[0])
    locks = LockManager(backend)

    assert await locks.acquire("invite_code_backfill:w1", ttl_seconds=300) is True
    assert await locks.acquire("invite_code_backfill:w1") is False
    assert await locks.acquire("invite_code_backfill:w2") is True
    assert await locks.is_held("invite_code_backfill:w1") is True

    now[0] = 301.0
    assert await locks.is_held("invite_code_backfill:w1") is False
    assert await locks.acquire("invite_code_backfill:w1") is True

    await locks.release("invite_code_backfill:w1")
    assert await locks.is_held("invite_code_backfill:w1") is False


async def test_noop_backend_never_caches_values():
    backend = NoOpCacheBackend()

    await backend.set("wg:version", "3")

    assert await backend.get("wg:version") is None
