# 📄 File: app/shared/infrastructure/database/session.py
#
# 🧭 Purpose (Layman Explanation):
# Gives every request its own short conversation with the database and makes
# sure that conversation is either saved completely or undone completely.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy session management: session factory bound to the shared
# engine, commit-on-success / rollback-on-error context managers and the
# FastAPI dependency used by the routers.
#
# 🔗 Dependencies:
# - sqlalchemy.ext.asyncio (AsyncSession, async_sessionmaker)
# - app/shared/infrastructure/database/connection.py (database engine)
#
# 🔄 Connected Modules / Calls From:
# - app/modules/plant_identification/presentation/dependencies.py
# - app/main.py (startup)

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from pydantic import ValidationError
from sqlalchemy import exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.shared.core.exceptions import DatabaseError, PlantSightingsException, TransactionError
from app.shared.infrastructure.database.connection import get_database_engine
from app.shared.utils.logging import get_logger

logger = get_logger(__name__)


class DatabaseSessionManager:
    """
    Manages database sessions with transaction handling and automatic cleanup.
    """

    def __init__(self):
        self._session_factory: Optional[async_sessionmaker] = None

    def initialize(self, engine: Optional[AsyncEngine] = None) -> None:
        """
        Initialize the session factory.

        Args:
            engine: Engine to bind; defaults to the global connection manager's
        """
        engine = engine or get_database_engine()

        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Keep objects accessible after commit
            autoflush=True,
        )
        logger.info("Database session factory initialized successfully")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get an async database session with automatic transaction management.

        Domain, validation and HTTP exceptions raised inside the block roll the
        transaction back and propagate unchanged so the API layer can render them.

        Yields:
            AsyncSession: Database session

        Raises:
            DatabaseError: If the session manager is not ready or SQL fails
            TransactionError: If an unexpected error aborts the transaction
        """
        if self._session_factory is None:
            raise DatabaseError("Session manager not initialized")

        session: AsyncSession = self._session_factory()

        try:
            yield session
            await session.commit()

        except (PlantSightingsException, ValidationError, StarletteHTTPException):
            await session.rollback()
            raise

        except exc.SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error occurred, transaction rolled back: {e}")
            raise DatabaseError(f"Database operation failed: {e}") from e

        except Exception as e:
            await session.rollback()
            logger.error(f"Unexpected error occurred, transaction rolled back: {e}")
            raise TransactionError(f"Transaction failed: {e}") from e

        finally:
            await session.close()

    @property
    def is_initialized(self) -> bool:
        return self._session_factory is not None


# Global session manager instance
session_manager = DatabaseSessionManager()


def initialize_sessions(engine: Optional[AsyncEngine] = None) -> None:
    """Initialize the global database session manager."""
    session_manager.initialize(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides database sessions.

    Usage:
        @router.post("/sightings")
        async def create_sighting(
            db: AsyncSession = Depends(get_db_session)
        ):
            ...

    Yields:
        AsyncSession: Database session
    """
    async with session_manager.get_session() as session:
        yield session

