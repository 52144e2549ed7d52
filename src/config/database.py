import contextlib
import logging
import sys
from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.config.settings import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # additional guests and co-host rows rely on ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(url: str) -> AsyncEngine:
    url = str(url)
    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=settings.LOG_DB, connect_args={"timeout": 15})
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    # the reminder loop holds connections across long idle periods
    return create_async_engine(url, echo=settings.LOG_DB, pool_pre_ping=True)


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.DB_DSN)
if "pytest" in sys.modules:
    engine = create_engine(generate_test_db_dsn(settings.DB_DSN))

async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit: bool = True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on success and rolls back on error.

    Repositories pass ``session_overwrite`` in tests so every call shares one
    in-memory database; the caller then owns the transaction.
    """
    if session_overwrite:
        yield session_overwrite
        return

    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        if auto_commit:
            await session.commit()


async def dispose_engine() -> None:
    await engine.dispose()
    logger.info("Database connections closed")
