"""
Database Connection Manager
---------------------------
Manages PostgreSQL database connections with SQLAlchemy async engine.
Backs the credential store (users table).
"""

from typing import Any, AsyncGenerator, Dict, Optional
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from loguru import logger

from session_auth.core.config_manager import settings


class DatabaseManager:
    """
    Manages database connections using SQLAlchemy async engine.

    Uses the asyncpg driver with pooled connections, pre-ping health checks
    and hourly connection recycling.
    """

    _instance = None
    _engine: Optional[AsyncEngine] = None
    _sessionmaker: Optional[async_sessionmaker] = None

    def __new__(cls, *args, **kwargs):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super(DatabaseManager, cls).__new__(cls)
        return cls._instance

    async def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize SQLAlchemy async engine.

        Args:
            config: Optional configuration override
        """
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        # Use provided config or settings
        if config is None:
            config = {
                "host": settings.database_host,
                "port": settings.database_port,
                "dbname": settings.database_name,
                "user": settings.database_user,
                "password": settings.database_password,
                "min_connections": settings.database_pool_size,
                "max_connections": settings.database_pool_size
                + settings.database_max_overflow,
            }

        logger.info(
            f"Initializing database connection to {config.get('host')}:{config.get('port')}"
        )

        try:
            db_url = (
                f"postgresql+asyncpg://"
                f"{config['user']}:{config['password']}@"
                f"{config['host']}:{config['port']}/"
                f"{config['dbname']}"
            )

            self._engine = create_async_engine(
                db_url,
                pool_size=config.get("min_connections", 5),
                max_overflow=config.get("max_connections", 10)
                - config.get("min_connections", 5),
                pool_pre_ping=True,  # Health checks
                pool_recycle=3600,  # Recycle connections every hour
                pool_timeout=30,  # Wait time for connection
                echo=False,
            )

            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info(
                "SQLAlchemy async engine and sessionmaker initialized successfully"
            )

        except Exception as e:
            logger.error(f"Error initializing SQLAlchemy engine: {e}")
            raise

    async def close(self) -> None:
        """Close SQLAlchemy engine."""
        if self._engine is not None:
            logger.info("Disposing SQLAlchemy engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("SQLAlchemy engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy async session from the sessionmaker.

        Yields:
            AsyncSession: Active SQLAlchemy session with automatic
                         commit on success or rollback on exception

        Raises:
            RuntimeError: If database not initialized
        """
        if not self._sessionmaker:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
            logger.debug("Session committed successfully")
        except Exception as e:
            await session.rollback()
            logger.warning(f"Session rolled back due to error: {e}")
            raise
        finally:
            await session.close()


# Global database manager instance
db_manager = DatabaseManager()
