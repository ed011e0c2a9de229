# 📄 File: app/shared/infrastructure/database/connection.py
#
# 🧭 Purpose (Layman Explanation):
# Opens and looks after the connection to the database where plant profiles,
# sightings and tours are kept, and checks that it is still answering.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy engine management: declarative Base, pooled engine creation
# (asyncpg in production, aiosqlite for local runs and tests), optional table
# creation, health checks with retries and orderly disposal.
#
# 🔗 Dependencies:
# - sqlalchemy (async engine)
# - app/shared/config/settings.py (database configuration)
# - asyncpg / aiosqlite (async drivers)
#
# 🔄 Connected Modules / Calls From:
# - app/shared/infrastructure/database/session.py (session management)
# - app/modules/plant_identification/infrastructure/database/models.py (Base)
# - app/main.py (startup/shutdown) and app/api/v1/health.py

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.shared.config.settings import Settings
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every module's ORM models."""


def _json_serializer(value: Any) -> str:
    # Keep non-ASCII plant names searchable inside JSON columns
    return json.dumps(value, ensure_ascii=False)


def build_engine_params(settings: Settings) -> Dict[str, Any]:
    """
    Build SQLAlchemy engine parameters for the configured backend.

    SQLite has no server-side pool, so the pool settings only apply to
    PostgreSQL. In-memory SQLite needs a StaticPool so every session sees
    the same database.
    """
    url = make_url(settings.database_url)

    if url.get_backend_name() == "sqlite":
        params: Dict[str, Any] = {
            "url": settings.database_url,
            "echo": settings.DB_ECHO,
            "connect_args": {"check_same_thread": False},
            "json_serializer": _json_serializer,
        }
        if not url.database or url.database == ":memory:":
            params["poolclass"] = StaticPool
        return params

    return {
        "url": settings.database_url,
        "echo": settings.DB_ECHO,
        "json_serializer": _json_serializer,
        "pool_pre_ping": True,  # Validate connections before use
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "connect_args": {
            "server_settings": {
                "application_name": "plant_sightings_backend",
                "jit": "off"
            },
            "command_timeout": 60,
            "statement_cache_size": 0,
        }
    }


class DatabaseConnectionManager:
    """
    Manages database connections with connection pooling,
    health monitoring, and automatic retry logic.
    """

    def __init__(self):
        self._engine: Optional[AsyncEngine] = None
        self._health_check_query = text("SELECT 1")
        self._retry_attempts = 3
        self._retry_delay = 1.0

    async def initialize(self, settings: Settings) -> None:
        """
        Initialize database engine with connection pooling.

        Args:
            settings: Application settings carrying the database URL
        """
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        logger.info("Initializing database connection pool...")
        self._engine = create_async_engine(**build_engine_params(settings))

        if self._engine.dialect.name == "sqlite":
            self._enable_sqlite_foreign_keys()

        health = await self.health_check()
        if health["status"] != "healthy":
            await self.close()
            raise RuntimeError(health["error"])

        logger.info(f"✅ Database connection initialized ({self._engine.dialect.name})")

    def _enable_sqlite_foreign_keys(self) -> None:
        """SQLite only enforces ON DELETE CASCADE with the pragma on."""

        @event.listens_for(self._engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async def create_tables(self) -> None:
        """Create every table registered on Base (local runs and tests)."""
        if self._engine is None:
            raise RuntimeError("Database engine not initialized")

        # Register module models on the metadata
        import app.modules.plant_identification.infrastructure.database.models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def health_check(self) -> dict:
        """
        Perform database health check and return structured status.
        """
        if self._engine is None:
            return {
                "status": "unhealthy",
                "error": "Database engine not initialized",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

        last_error = None
        for attempt in range(self._retry_attempts):
            try:
                async with self._engine.connect() as conn:
                    result = await conn.execute(self._health_check_query)
                    result.scalar()

                return {
                    "status": "healthy",
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }

            except Exception as e:
                last_error = e
                logger.warning(
                    f"Database health check failed (attempt {attempt + 1}/{self._retry_attempts}): {e}"
                )
                if attempt < self._retry_attempts - 1:
                    await asyncio.sleep(self._retry_delay * (2 ** attempt))

        logger.error("Database health check failed after all retry attempts")
        return {
            "status": "unhealthy",
            "error": f"Database health check failed: {last_error}",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    async def close(self) -> None:
        """Close database engine and all connections."""
        if self._engine is None:
            logger.warning("Database engine not initialized, nothing to close")
            return

        logger.info("Closing database connection pool...")
        await self._engine.dispose()
        self._engine = None
        logger.info("✅ Database connection pool closed")

    @property
    def engine(self) -> Optional[AsyncEngine]:
        """Get the SQLAlchemy async engine."""
        return self._engine

    @property
    def is_initialized(self) -> bool:
        """Check if database engine is initialized."""
        return self._engine is not None


# Global database connection manager instance
db_manager = DatabaseConnectionManager()


async def initialize_database(settings: Settings) -> None:
    """Initialize the global database connection manager."""
    try:
        await db_manager.initialize(settings)
        if settings.DB_AUTO_CREATE_TABLES:
            await db_manager.create_tables()
    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {e}", exc_info=True)
        raise


async def close_database() -> None:
    """Close the global database connection manager."""
    await db_manager.close()


def get_database_engine() -> AsyncEngine:
    """
    Get the database engine instance.

    Returns:
        AsyncEngine: SQLAlchemy async engine

    Raises:
        RuntimeError: If database is not initialized
    """
    if not db_manager.is_initialized:
        raise RuntimeError("Database not initialized. Call initialize_database() first.")

    return db_manager.engine


async def database_health_check() -> dict:
    """Perform database health check."""
    return await db_manager.health_check()
