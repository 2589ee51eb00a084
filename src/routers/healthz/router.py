import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text

from src.cache import get_cache_backend
from src.cache.backends import CacheBackend, NoOpCacheBackend
from src.config.database import async_session_manager

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    database: str
    cache: str


class HealthProbes:
    """Cheap round trips to the database and the cache backend."""

    def __init__(self, cache_backend: CacheBackend):
        self.cache_backend = cache_backend

    async def database(self) -> str:
        try:
            async with async_session_manager(auto_commit=False) as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning(f"Database health probe failed: {e}")
            return "error"
        return "ok"

    async def cache(self) -> str:
        if isinstance(self.cache_backend, NoOpCacheBackend):
            return "disabled"
        try:
            await self.cache_backend.get("healthz")
        except Exception as e:
            logger.warning(f"Cache health probe failed: {e}")
            return "error"
        return "ok"


def get_health_probes() -> HealthProbes:
    return HealthProbes(get_cache_backend())


@router.get("/", response_model=HealthCheckResponse)
async def health_check(probes: HealthProbes = Depends(get_health_probes)) -> HealthCheckResponse:
    """
    Health check endpoint to verify the API and its backing services.

    A failing dependency reports ``degraded`` rather than an error status,
    since the cache fails open and RSVPs still work without it.
    """
    database = await probes.database()
    cache = await probes.cache()
    status = "healthy" if database == "ok" and cache != "error" else "degraded"
    return HealthCheckResponse(status=status, database=database, cache=cache)
