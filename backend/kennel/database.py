"""
Kennel API - Database Session Management
==========================================

What:  Async SQLAlchemy engine, session factory and transaction helper for
       the database store.
How:   `Database` owns one engine per application instance. Stores for every
       collection share it; the registry disposes it on shutdown.
Who:   Used by SqlStore, the health route (ping) and Alembic (Base.metadata).

Connection Pooling Strategy:
    SQLite (aiosqlite) uses SQLAlchemy's default pool for file databases.
    Server databases (PostgreSQL via asyncpg) get pre-ping and hourly
    recycling so connections survive a database restart.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from kennel.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object, which Database.ensure_schema uses for create_all and Alembic
    uses for --autogenerate.
    """
    pass


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the configured database URL.

    SQLite does not take pool tuning arguments, so they are only passed for
    server databases.
    """
    url = settings.database_url
    options = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **options)


class Database:
    """
    Engine + session factory for one application instance.

    The schema is created lazily on first use (idempotent create_all) so a
    fresh SQLite file works without running migrations. Deployments against
    PostgreSQL should still run `alembic upgrade head`.
    """

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        self.engine = create_engine_from_settings(settings)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._schema_lock = asyncio.Lock()
        self._schema_ready = False

    async def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            # Registers RecordRow with Base.metadata
            from kennel.models import record  # noqa: F401

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            self._schema_ready = True
            logger.info("Database schema ready at %s", self.engine.url.render_as_string(hide_password=True))

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits on success and rolls back on any error.

        Example:
            async with database.transaction() as session:
                session.add(RecordRow(...))
        """
        await self.ensure_schema()
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Run SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
