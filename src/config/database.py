import contextlib
import sys
from collections.abc import AsyncIterator

from alembic import command, config
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config.settings import settings


def create_engine(url: str):
    url = str(url)
    use_echo = settings.LOG_DB
    connect_args = {}
    if "sqlite" in url:
        connect_args = {"timeout": 15}
    engine = create_async_engine(
        url,
        echo=use_echo,
        future=True,  # use the sqlalchemy 2.0 classes
        connect_args=connect_args,
    )
    if "sqlite" in url:
        _enable_sqlite_savepoints(engine)
    return engine


def _enable_sqlite_savepoints(engine) -> None:
    # the sqlite driver defers BEGIN on its own, which breaks SAVEPOINT
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.database_url)
if "pytest" in sys.modules:
    # pin the engine to the testing database
    engine = create_engine(generate_test_db_dsn(settings.database_url))


def run_upgrade(connection, cfg):
    cfg.attributes["connection"] = connection
    cfg.attributes["configure_logger"] = False
    command.upgrade(cfg, "head")


async def init_test_db():
    async with engine.begin() as conn:
        await conn.run_sync(run_upgrade, config.Config("alembic.ini"))


async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    if session_overwrite:
        yield session_overwrite
    else:
        async with async_session_maker() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                raise e
            else:
                if auto_commit:
                    await session.commit()
