"""
Pokedex Backend — Database Session Management
==============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns the engine and session factory. It is built
       during application startup, stored on `app.state.database`, and
       disposed at shutdown. The session dependency reads it from the
       request's app, so no handler depends on an import-time engine.
When:  Engine at startup; sessions per request.

Connection Pooling Strategy:
    PostgreSQL (asyncpg): pooled with pre-ping and hourly recycling.
    SQLite (aiosqlite):   SQLAlchemy picks its own pool class, so pool
                          sizing arguments are not passed.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pokedex.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models register with this metadata; `Database.create_schema()` builds
    their tables at startup.
    """
    pass


class Database:
    """
    Explicit handle on the record store connection.

    Lifecycle:
        db = Database(url)        # engine created, no connection opened yet
        await db.create_schema()  # tables created if absent
        ...                       # sessions handed out per request
        await db.dispose()        # pooled connections closed
    """

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        self.url = url or settings.database_url
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=settings.log_level == "DEBUG" if echo is None else echo,
            **self._pool_options(self.url),
        )
        # expire_on_commit=False: records are read after commit when serialized
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _pool_options(url: str) -> Dict[str, Any]:
        if make_url(url).get_backend_name() == "sqlite":
            return {}
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "pool_recycle": 3600,
        }

    async def create_schema(self) -> None:
        """Create tables for every registered model (idempotent)."""
        # Import registers the model on Base.metadata
        from pokedex.models import pokemon  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Record store schema ready")

    async def ping(self) -> bool:
        """Run SELECT 1; used by the health check."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
