"""
Redis Connection Manager
------------------------
Manages the Redis connection pool backing the session store.
Provides an async Redis client with connection pooling and an explicit
connection state.

CONNECTION POLICY:
==================
- Building the pool (``initialize``) does no network I/O.
- The first command triggers ``connect``: one PING plus at most
  ``redis_connect_retries`` further attempts.
- A connect attempt as a whole is bounded by ``connect_timeout``.
- A failed connect (or a connection error or command timeout later on) moves
  the manager to UNAVAILABLE. Requests are not retried one by one while unavailable; a single
  reconnect attempt is allowed once ``redis_reconnect_interval_seconds`` has
  elapsed, and a successful ``ping`` (health check) restores CONNECTED.
"""

import asyncio
import time
from enum import Enum
from typing import Optional

import redis.asyncio as aioredis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError
from loguru import logger

from session_auth.core.config_manager import settings

# Errors that mean "the store is not reachable", as opposed to programming errors
REDIS_UNAVAILABLE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


class RedisManager:
    """Manages Redis connection pool, client and connection state."""

    def __init__(
        self,
        connect_retries: Optional[int] = None,
        reconnect_interval: Optional[float] = None,
        connect_timeout: Optional[float] = None,
    ):
        """Initialize Redis manager."""
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[aioredis.Redis] = None
        self._state = ConnectionState.DISCONNECTED
        self._last_attempt: Optional[float] = None
        self._connect_lock = asyncio.Lock()
        self._connect_retries = (
            settings.redis_connect_retries if connect_retries is None else connect_retries
        )
        self._reconnect_interval = (
            settings.redis_reconnect_interval_seconds
            if reconnect_interval is None
            else reconnect_interval
        )
        self._connect_timeout = (
            settings.session_store_operation_timeout_seconds
            if connect_timeout is None
            else connect_timeout
        )

    def initialize(self) -> None:
        """
        Initialize Redis connection pool and client.
        Creates connection pool based on configuration; connecting is lazy.
        """
        if self._pool is not None:
            logger.warning("Redis connection pool already initialized")
            return

        logger.info(
            f"Initializing Redis connection to {settings.redis_host}:{settings.redis_port}"
        )

        # Create connection pool
        self._pool = ConnectionPool(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            max_connections=settings.redis_max_connections,
            decode_responses=True,  # Auto-decode responses to strings
            socket_connect_timeout=settings.redis_socket_timeout_seconds,
            socket_timeout=settings.redis_socket_timeout_seconds,
            socket_keepalive=True,
            health_check_interval=30,
        )

        # Create Redis client
        self._client = aioredis.Redis(connection_pool=self._pool)

        logger.info("Redis connection pool initialized (connection is lazy)")

    async def connect(self) -> bool:
        """
        Attempt to reach Redis, retrying at most ``connect_retries`` times.

        All attempts together are bounded by ``connect_timeout``.

        Returns:
            bool: True if Redis answered a PING
        """
        if self._client is None:
            self.initialize()

        try:
            return await asyncio.wait_for(
                self._attempt_connect(), timeout=self._connect_timeout
            )
        except asyncio.TimeoutError:
            self._last_attempt = time.monotonic()
            self._set_state(ConnectionState.UNAVAILABLE)
            logger.warning(
                f"Redis connect timed out after {self._connect_timeout}s - "
                "session store running in degraded mode"
            )
            return False

    async def _attempt_connect(self) -> bool:
        attempts = 1 + self._connect_retries
        for attempt in range(1, attempts + 1):
            self._last_attempt = time.monotonic()
            try:
                await self._client.ping()
            except REDIS_UNAVAILABLE_ERRORS as e:
                logger.warning(
                    f"Redis connection attempt {attempt}/{attempts} failed: {e}"
                )
                continue
            self._set_state(ConnectionState.CONNECTED)
            return True

        self._set_state(ConnectionState.UNAVAILABLE)
        logger.warning("Redis unavailable - session store running in degraded mode")
        return False

    async def ensure_connected(self) -> bool:
        """
        Return whether commands should be sent to Redis right now.

        Connects lazily on first use. While UNAVAILABLE only one reconnect is
        attempted per reconnect interval; every other caller gets False
        immediately.
        """
        if self._state is ConnectionState.CONNECTED:
            return True
        if self._state is ConnectionState.UNAVAILABLE and not self._reconnect_due():
            return False

        async with self._connect_lock:
            # Another task may have finished connecting while we waited
            if self._state is ConnectionState.CONNECTED:
                return True
            if self._state is ConnectionState.UNAVAILABLE and not self._reconnect_due():
                return False
            return await self.connect()

    def mark_unavailable(self, error: Exception) -> None:
        """Record a connection failure or timeout observed while running a command."""
        if self._state is not ConnectionState.UNAVAILABLE:
            logger.warning(f"Redis marked unavailable: {error}")
        self._last_attempt = time.monotonic()
        self._set_state(ConnectionState.UNAVAILABLE)

    def _reconnect_due(self) -> bool:
        if self._last_attempt is None:
            return True
        return time.monotonic() - self._last_attempt >= self._reconnect_interval

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.info(f"Redis connection state: {self._state.value} -> {state.value}")
        self._state = state

    async def close(self) -> None:
        """Close Redis connection pool and cleanup."""
        if self._client is None:
            return

        logger.info("Closing Redis connections")
        await self._client.aclose()
        await self._pool.disconnect()
        self._client = None
        self._pool = None
        self._state = ConnectionState.DISCONNECTED
        logger.info("Redis connections closed")

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        A successful ping also restores the CONNECTED state after an outage.

        Returns:
            bool: True if Redis is responsive, False otherwise
        """
        if self._client is None:
            return False
        try:
            response = await asyncio.wait_for(
                self._client.ping(), timeout=self._connect_timeout
            )
        except REDIS_UNAVAILABLE_ERRORS as e:
            logger.error(f"Redis ping failed: {e}")
            self.mark_unavailable(e)
            return False
        self._last_attempt = time.monotonic()
        self._set_state(ConnectionState.CONNECTED)
        return bool(response)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def client(self) -> aioredis.Redis:
        """
        Get Redis client.

        Returns:
            aioredis.Redis: Redis client instance

        Raises:
            RuntimeError: If Redis not initialized
        """
        if self._client is None:
            raise RuntimeError("Redis not initialized. Call initialize() first.")
        return self._client


# Global Redis manager instance
redis_manager = RedisManager()
