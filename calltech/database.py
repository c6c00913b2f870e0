"""
Database session management.

The DataStore owns the async engine and session factory. It is built once
by the application lifespan and kept on ``app.state``; request handlers get
sessions through the ``get_db`` dependency.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from calltech.config.settings import Settings
from calltech.models.base import Base

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg:// if needed."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


class DataStore:
    """
    Process-wide database handle.

    Holds only configuration and a connection pool, never request state, so a
    single instance is shared by all requests.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "DataStore":
        """Create the engine described by settings."""
        url = normalize_database_url(settings.database_url)
        engine = create_async_engine(
            url,
            echo=settings.sql_echo,
            pool_pre_ping=True,  # Verify connections before using
            poolclass=NullPool if settings.environment == "test" else None,
        )
        logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
        return cls(engine)

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """
        Create all tables defined in the models.

        Development and tests only; production uses Alembic migrations.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """
        Drop all tables.

        WARNING: This will delete all data!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        """Dispose of the engine; called on application shutdown."""
        await self.engine.dispose()


def get_datastore(request: Request) -> DataStore:
    """Return the DataStore attached to the running application."""
    datastore: Optional[DataStore] = getattr(request.app.state, "datastore", None)
    if datastore is None:
        raise RuntimeError("DataStore not initialised. Is the application lifespan running?")
    return datastore


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions.

    Usage in FastAPI:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...

    Yields:
        AsyncSession: Database session
    """
    async for session in get_datastore(request).session():
        yield session
