"""Database client and session dependency for FastAPI.

The engine is owned by a ``DatabaseClient`` that the application builds at
startup and keeps on ``app.state``. Request handlers receive sessions through
the ``get_async_session`` dependency instead of reaching for a module global.
"""

from collections.abc import AsyncGenerator
from typing import Any, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from meeting_summarizer.core.config import Settings
from meeting_summarizer.core.exceptions import ConfigurationError
from meeting_summarizer.database.models import Base
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine described by the settings."""
    url = settings.database_url
    engine_kwargs: Dict[str, Any] = {"echo": settings.db.echo, "future": True}

    if url.startswith("postgresql+asyncpg"):
        engine_kwargs.update(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.max_overflow,
            # Disable prepared statement cache for PgBouncer compatibility
            connect_args={"statement_cache_size": 0},
        )
    elif url.startswith("sqlite") and ":memory:" in url:
        # One shared connection, or every session would see an empty database
        engine_kwargs["poolclass"] = StaticPool

    return create_async_engine(url, **engine_kwargs)


class DatabaseClient:
    """Database client with connection and migration management."""

    def __init__(self, engine: AsyncEngine):
        """Initialize database client.

        Args:
            engine: SQLAlchemy async engine
        """
        self.engine = engine
        self.session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseClient":
        return cls(create_engine_from_settings(settings))

    async def connect(self) -> bool:
        """Test database connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            LOGGER.info("Database connection successful")
            return True
        except Exception:
            LOGGER.error("Database connection failed", exc_info=True)
            raise

    async def disconnect(self) -> None:
        """Dispose of the engine and its pool."""
        await self.engine.dispose()
        LOGGER.info("Database connection closed")

    async def create_tables(self) -> None:
        """Create tables that don't exist yet without touching existing ones."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        LOGGER.info("Database tables created/verified successfully")

    async def health_check(self) -> dict:
        """Check database health."""
        try:
            async with self.engine.connect() as conn:
                val = await conn.scalar(text("SELECT 1"))
            return {
                "status": "healthy",
                "connected": True,
                "latency_test": "passed" if val == 1 else "failed",
            }
        except Exception as e:
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
            }


async def init_database(client: DatabaseClient, auto_migrate: bool = True) -> None:
    """Connect and optionally create the schema.

    Args:
        client: Database client built at startup
        auto_migrate: Whether to create missing tables
    """
    LOGGER.info("Initializing database connection...")
    await client.connect()
    if auto_migrate:
        await client.create_tables()
    LOGGER.info("Database initialization completed")


def get_database_client(request: Request) -> DatabaseClient:
    """FastAPI dependency returning the client created at startup."""
    client: Optional[DatabaseClient] = getattr(request.app.state, "db_client", None)
    if client is None:
        raise ConfigurationError("Database client is not initialized")
    return client


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting async database session.

    Yields:
        AsyncSession: Database session
    """
    client = get_database_client(request)
    async with client.session_maker() as session:
        yield session
