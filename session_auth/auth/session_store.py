"""
Session Store
-------------
Key-value abstraction holding the token allowlist and per-user session sets.

Key layout:
    {kind}:{jti}            -> user id, TTL = token lifetime (allowlist entry)
    user:{user_id}:sessions -> set of jti, no TTL (bulk revocation index)

DEGRADED MODE:
==============
When the backing service is unreachable, writes are silent no-ops and reads
return negative/empty results (get -> None, exists -> False,
members_of -> empty set, delete -> False). Nothing raises into request
handling. Reads failing negative makes authentication fail closed: no store,
no confirmed token.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Set, Tuple, Union
from uuid import UUID

from loguru import logger
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from session_auth.auth.models import TokenKind
from session_auth.core.redis_connection import REDIS_UNAVAILABLE_ERRORS, RedisManager


def allowlist_key(kind: TokenKind, jti: str) -> str:
    return f"{kind.value}:{jti}"


def user_sessions_key(user_id: Union[UUID, str]) -> str:
    return f"user:{user_id}:sessions"


def _is_connection_failure(error: Exception) -> bool:
    # A hung server shows up as timeouts; server-side command errors do not count
    return isinstance(
        error, (RedisConnectionError, RedisTimeoutError, OSError, asyncio.TimeoutError)
    )


class SessionStore(Protocol):
    """Interface consumed by the auth core."""

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def delete(self, key: str) -> bool: ...

    async def exists(self, key: str) -> bool: ...

    async def add_to_set(self, set_key: str, member: str) -> None: ...

    async def remove_from_set(self, set_key: str, member: str) -> None: ...

    async def members_of(self, set_key: str) -> Set[str]: ...

    async def is_available(self) -> bool: ...


class RedisSessionStore:
    """
    Session store backed by Redis through a ``RedisManager``.

    Each command is bounded by ``operation_timeout``; a timeout or Redis error
    yields the degraded-mode default. Connection errors and timeouts also mark
    the manager unavailable so later requests skip Redis until the next
    reconnect window.
    """

    def __init__(
        self,
        manager: RedisManager,
        operation_timeout: float = 2.0,
        log_commands: bool = False,
    ):
        self._manager = manager
        self._operation_timeout = operation_timeout
        self._log_commands = log_commands

    async def _run(
        self,
        operation: str,
        key: str,
        command: Callable[[], Awaitable[Any]],
        default: Any = None,
    ) -> Any:
        if not await self._manager.ensure_connected():
            return default

        if self._log_commands:
            logger.debug(f"Executing Redis {operation} command on key {key}")

        try:
            return await asyncio.wait_for(command(), timeout=self._operation_timeout)
        except REDIS_UNAVAILABLE_ERRORS as e:
            logger.warning(f"Redis {operation} operation failed for key {key}: {e!r}")
            if _is_connection_failure(e):
                self._manager.mark_unavailable(e)
            return default

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        await self._run(
            "SET", key, lambda: self._manager.client.set(key, value, ex=ttl or None)
        )

    async def get(self, key: str) -> Optional[str]:
        return await self._run("GET", key, lambda: self._manager.client.get(key))

    async def delete(self, key: str) -> bool:
        removed = await self._run(
            "DEL", key, lambda: self._manager.client.delete(key), default=0
        )
        return bool(removed)

    async def exists(self, key: str) -> bool:
        result = await self._run(
            "EXISTS", key, lambda: self._manager.client.exists(key), default=0
        )
        return bool(result)

    async def add_to_set(self, set_key: str, member: str) -> None:
        await self._run(
            "SADD", set_key, lambda: self._manager.client.sadd(set_key, member)
        )

    async def remove_from_set(self, set_key: str, member: str) -> None:
        await self._run(
            "SREM", set_key, lambda: self._manager.client.srem(set_key, member)
        )

    async def members_of(self, set_key: str) -> Set[str]:
        members = await self._run(
            "SMEMBERS",
            set_key,
            lambda: self._manager.client.smembers(set_key),
            default=set(),
        )
        return set(members)

    async def is_available(self) -> bool:
        return await self._manager.ping()


class MemorySessionStore:
    """
    In-process session store with the same contract as ``RedisSessionStore``.

    Used for local development (SESSION_STORE_BACKEND=memory) and tests.
    Setting ``available = False`` simulates an unreachable store.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._values: Dict[str, Tuple[str, Optional[float]]] = {}
        self._sets: Dict[str, Set[str]] = {}
        self.available = True

    def _live_value(self, key: str) -> Optional[str]:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._values[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if not self.available:
            return
        expires_at = self._clock() + ttl if ttl else None
        self._values[key] = (value, expires_at)

    async def get(self, key: str) -> Optional[str]:
        if not self.available:
            return None
        return self._live_value(key)

    async def delete(self, key: str) -> bool:
        if not self.available:
            return False
        value_removed = self._live_value(key) is not None
        self._values.pop(key, None)
        set_removed = self._sets.pop(key, None) is not None
        return value_removed or set_removed

    async def exists(self, key: str) -> bool:
        if not self.available:
            return False
        return self._live_value(key) is not None or bool(self._sets.get(key))

    async def add_to_set(self, set_key: str, member: str) -> None:
        if not self.available:
            return
        self._sets.setdefault(set_key, set()).add(member)

    async def remove_from_set(self, set_key: str, member: str) -> None:
        if not self.available:
            return
        members = self._sets.get(set_key)
        if members is not None:
            members.discard(member)
            if not members:
                del self._sets[set_key]

    async def members_of(self, set_key: str) -> Set[str]:
        if not self.available:
            return set()
        return set(self._sets.get(set_key, set()))

    async def is_available(self) -> bool:
        return self.available
