"""
Database engine and session handling.

One `Database` per process (the module-level `db`), initialized lazily by
the CLI and the API. Tests build their own against aiosqlite.

Responsibility: Own the async engine and hand out transactional sessions
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker
)
from sqlalchemy.pool import NullPool, StaticPool
import logging

from ..config import settings

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.rstrip("/").endswith(":") or ":memory:" in url


def engine_options(url: str) -> Dict[str, Any]:
    """
    Pool arguments for create_async_engine.

    In-memory SQLite keeps a single shared connection, file SQLite opens a
    connection per checkout, and PostgreSQL gets a sized pool from
    settings.db.
    """
    if url.startswith("sqlite"):
        if _is_memory_sqlite(url):
            return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
        return {"poolclass": NullPool}

    return {
        "pool_size": settings.db.pool_size,
        "max_overflow": settings.db.max_overflow,
        "pool_timeout": settings.db.pool_timeout,
        "pool_recycle": settings.db.pool_recycle,
        "pool_pre_ping": True,
    }


class Database:
    """
    Async engine plus session factory.

    Example:
        database = Database("sqlite+aiosqlite://")
        await database.initialize()
        async with database.session() as session:
            await SourceRepository(session).list_all()
        await database.close()
    """

    def __init__(self, connection_string: Optional[str] = None):
        # None means settings.db, resolved at initialize() time
        self.connection_string = connection_string
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_initialized(self) -> bool:
        return self.session_factory is not None

    async def initialize(self) -> None:
        if self.is_initialized:
            logger.warning("Database already initialized")
            return

        url = self.connection_string or settings.db.connection_string
        options = engine_options(url)
        logger.info(
            f"Initializing database ({url.split('://')[0]}, "
            f"pool={getattr(options.get('poolclass'), '__name__', 'queue')})"
        )

        self.engine = create_async_engine(
            url,
            echo=settings.db.echo,
            echo_pool=settings.db.echo_pool,
            **options
        )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # rows are read after the session closes
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Transactional session: commits when the block exits normally and
        rolls back (then re-raises) on any exception.
        """
        if not self.is_initialized:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self.session_factory()
        try:
            yield session
            if session.in_transaction():
                await session.commit()
        except Exception as e:
            logger.error(f"Rolling back session: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create missing tables from the ORM metadata."""
        if self.engine is None:
            raise RuntimeError("Database not initialized")

        from .models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Ensured {len(Base.metadata.tables)} tables exist")

    async def close(self) -> None:
        """Dispose of the engine; safe to call when never initialized."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.session_factory = None


db = Database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a session from the global database"""
    if not db.is_initialized:
        await db.initialize()
    async with db.session() as session:
        yield session
