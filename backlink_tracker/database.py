from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional
from fastapi import Request
import asyncio
import logging
import os

from backlink_tracker.config import Settings, get_settings
from backlink_tracker.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def normalize_database_url(database_url: str) -> str:
    """Rewrite sync driver URLs to their async equivalents."""
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return database_url.replace(prefix, "postgresql+asyncpg://", 1)
    return database_url


class Database:
    """Owns the engine and connection pool for one application instance.

    Created on startup, attached to ``app.state.database`` and disposed on
    shutdown. Every unit of work goes through :meth:`session` or
    :meth:`transaction`, which always hand the connection back to the pool.
    """

    def __init__(self, database_url: Optional[str] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.url = normalize_database_url(database_url or self.settings.database_url)
        self.engine: Optional[AsyncEngine] = None
        self.session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _engine_options(self) -> dict:
        if self.is_sqlite:
            options = {
                # sqlite3 only supports a lock wait (busy) timeout, not a per-statement limit.
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": self.settings.statement_timeout,
                },
            }
            if self.url.endswith(":memory:"):
                options["poolclass"] = StaticPool
            return options

        return {
            "pool_size": self.settings.pool_size,
            "pool_timeout": self.settings.pool_timeout,
            "pool_recycle": self.settings.pool_recycle,
            "pool_pre_ping": True,
            "connect_args": {
                "command_timeout": self.settings.statement_timeout,
                "server_settings": {
                    "statement_timeout": str(self.settings.statement_timeout * 1000),
                },
            },
        }

    async def connect(self) -> None:
        """Create the pool, the schema and the seeded lookup rows."""
        if self.url.startswith("sqlite+aiosqlite:///") and not self.url.endswith(":memory:"):
            db_path = self.url.replace("sqlite+aiosqlite:///", "")
            db_dir = os.path.dirname(db_path)
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir, exist_ok=True)

        self.engine = create_async_engine(self.url, **self._engine_options())
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Import models to register them with Base.metadata
        from backlink_tracker import models  # noqa: F401
        from backlink_tracker.services.lookup_service import seed_defaults

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.transaction() as session:
            await seed_defaults(session)

        logger.info(f"Database ready ({self.engine.dialect.name})")

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connection pool closed")
        self.engine = None
        self.session_maker = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.session_maker is None:
            raise RuntimeError("Database is not connected")
        async with self.session_maker() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session inside a single transaction: commit on success, rollback on error."""
        async with self.session() as session:
            async with session.begin():
                yield session

    async def ping(self) -> bool:
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with get_database(request).session() as session:
        try:
            yield session
        except (OperationalError, asyncio.TimeoutError) as e:
            logger.error(f"Store unavailable on {request.method} {request.url.path}: {e}")
            raise StoreUnavailableError("The database is temporarily unavailable, please retry") from e
