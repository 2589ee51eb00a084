from src.cache.tests.inmemory_backend import BrokenCacheBackend, InMemoryCacheBackend
from src.routers.healthz.router import HealthProbes, get_health_probes


async def test_health_check(client):
    """Test the health check endpoint returns healthy status."""
    response = await client.get("/healthz/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    assert data["database"] == "ok"
    assert data["cache"] == "disabled"


async def test_health_check_with_cache(client_factory):
    probes = HealthProbes(InMemoryCacheBackend())

    async with client_factory({get_health_probes: lambda: probes}) as client:
        response = await client.get("/healthz/")

    assert response.json()["cache"] == "ok"
    assert response.json()["status"] == "healthy"


async def test_health_check_degraded_when_cache_is_down(client_factory):
    probes = HealthProbes(BrokenCacheBackend())

    async with client_factory({get_health_probes: lambda: probes}) as client:
        response = await client.get("/healthz/")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["cache"] == "error"


async def test_root_endpoint(client):
    """Test the root endpoint returns welcome message."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Welcome to the Wedding Platform API"
