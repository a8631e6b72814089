"""
SprintSpace Backend — Persistence Gateway
===========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` instance is constructed by the application root
       (create_app) and stored on `app.state.database`. Route handlers get a
       per-request session through `get_db_session`, which commits on success
       and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created with the app; sessions are created per-request;
       the engine is disposed on shutdown by the lifespan handler.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests, local development) skip pool sizing. In-memory SQLite
    uses a StaticPool so every session sees the same database. That single
    shared connection also means concurrent sessions share one transaction:
    use `:memory:` for serial work only, and a file-backed SQLite URL (or
    Postgres) whenever requests overlap.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from sprintspace.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with the shared metadata
    used by Alembic and by Database.create_all().
    """
    pass


def _engine_options(url: str, settings: Settings) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


class Database:
    """
    Owns the engine and session factory for one application instance.

    Lifecycle:
        1. Constructed in create_app() from Settings (no connection yet)
        2. Optionally creates tables on startup (DB_AUTO_CREATE)
        3. Hands out one AsyncSession per request
        4. dispose() closes all pooled connections on shutdown
    """

    def __init__(self, url: str, settings: Settings):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **_engine_options(url, settings))
        # expire_on_commit=False: response models read attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, settings)

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata if missing."""
        # Import models so they register with Base.metadata
        from sprintspace.models import event, registration  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def ping(self) -> bool:
        """Run SELECT 1; return False when the database is unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()



def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database
        2. Yields it to the route handler
        3. On success: commits anything the service left pending
        4. On error: rolls back (a registration insert and its counter
           update are discarded together)
        5. Always: closes the session

    Mutating service methods commit their own unit of work before returning,
    so the response is only produced once the write is durable.

    Example usage in a route:
        @router.get("/events")
        async def list_events(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with get_database(request).session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
