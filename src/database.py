"""
Credential store engine and sessions.

One AsyncEngine per process, built from DATABASE_URL. PostgreSQL (asyncpg)
in deployment, SQLite (aiosqlite) for local runs and tests. Each request
gets its own AsyncSession; the user services commit once per operation.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from src.config import get_settings

settings = get_settings()

# How long a SQLite writer waits on a competing registration before failing
SQLITE_BUSY_TIMEOUT_MS = 5000


def _enable_sqlite_wal(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
    cursor.close()


def create_store_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Build the engine for the users table.

    SQLite gets a connection per session (NullPool), WAL journaling and a
    busy timeout. Anything else is treated as a pooled server database.
    """
    if database_url.startswith("sqlite"):
        store_engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(store_engine.sync_engine, "connect", _enable_sqlite_wal)
        return store_engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


engine = create_store_engine(settings.database_url, echo=settings.debug)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session for one request.

    A request that fails before its service committed leaves nothing behind:
    the open transaction is rolled back here.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the users table if it does not exist (local runs; use alembic elsewhere)."""
    from src.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections at shutdown."""
    await engine.dispose()
