"""Core classes and helpers for DB connections"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, cast
from typing import Callable, AsyncContextManager

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from ledger.core import config
from ledger.core.errors import StorageError
from ledger.core.logging import get_logger

Base = declarative_base()
SessionMaker = Callable[[], AsyncContextManager[AsyncSession]]
logger = get_logger(__name__)


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # driver-level transaction handling off; _begin_immediate issues BEGIN
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_immediate(conn) -> None:
    """Take the SQLite write lock when a transaction starts, not at its first write."""
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseManager:
    def __init__(self, engine: Optional[AsyncEngine] = None) -> None:
        """Initialize DatabaseManager with optional engine for testing."""
        self.engine = engine or self._create_engine()
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _configure_sqlite_connection)
            event.listen(self.engine.sync_engine, "begin", _begin_immediate)
        self._session_factory: Optional[SessionMaker] = None

    def _create_engine(self) -> AsyncEngine:
        """Create async engine from settings."""
        settings = config.get_settings()
        options = {
            "echo": settings.DB_ECHO,
            "pool_pre_ping": True,  # Enable connection health checks
        }
        if not settings.is_sqlite:
            options["pool_size"] = settings.DB_POOL_SIZE
            options["max_overflow"] = settings.DB_MAX_OVERFLOW
        return create_async_engine(settings.async_db_url, **options)

    def get_session(self) -> SessionMaker:
        """Returns SessionMaker for database sessions."""
        if not self.engine:
            raise ValueError("Database engine wasn't initialized")

        if self._session_factory is None:
            self._session_factory = cast(
                SessionMaker,
                sessionmaker(
                    self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autocommit=False,
                    autoflush=False,
                ),
            )
        return self._session_factory

    @asynccontextmanager
    async def get_db(self) -> AsyncIterator[AsyncSession]:
        """Get database session context manager."""
        async_session = self.get_session()
        async with async_session() as session:
            try:
                yield session
            finally:
                await session.close()

    async def create_schema(self) -> None:
        """Create every table registered on Base."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block as one storage transaction.

    Commits when the block finishes, rolls back on any exception. Storage
    failures surface as StorageError; nothing is retried.
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("storage_transaction_failed", error=str(exc))
        raise StorageError(str(exc)) from exc
    except BaseException:
        await session.rollback()
        raise
