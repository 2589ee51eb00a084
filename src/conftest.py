import os

# Throwaway sqlite database for the test run; must be set before settings load
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./wedding_platform.db")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("SENTRY_DSN", "")

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.config.database import async_session_maker, engine  # noqa: E402
from src.main import app  # noqa: E402
from src.models import BaseModel, Wedding  # noqa: E402


@pytest.fixture(scope="function")
async def db_session():
    """A session on a freshly created schema, dropped again afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def wedding(db_session) -> Wedding:
    wedding = Wedding(couple_name="Ana & Ben", website_url="https://ana-and-ben.example")
    db_session.add(wedding)
    await db_session.flush()
    return wedding


@pytest.fixture
def client_factory():
    """Build a test client with the given dependency overrides applied."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture(scope="function")
async def client(client_factory):
    async with client_factory() as ac:
        yield ac
