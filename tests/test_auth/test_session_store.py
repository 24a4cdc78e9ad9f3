"""
Session Store Tests
-------------------
In-memory and Redis-backed session stores, including degraded mode.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from session_auth.auth.models import TokenKind
from session_auth.auth.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    allowlist_key,
    user_sessions_key,
)
from session_auth.core.redis_connection import ConnectionState, RedisManager


def test_key_layout():
    user_id = uuid4()

    assert allowlist_key(TokenKind.ACCESS, "j1") == "access:j1"
    assert allowlist_key(TokenKind.REFRESH, "j1") == "refresh:j1"
    assert user_sessions_key(user_id) == f"user:{user_id}:sessions"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestMemorySessionStore:
    def setup_method(self):
        self.clock = FakeClock()
        self.store = MemorySessionStore(clock=self.clock)

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        await self.store.set("access:j1", "user-1", ttl=60)

        assert await self.store.get("access:j1") == "user-1"
        assert await self.store.exists("access:j1") is True

        assert await self.store.delete("access:j1") is True

        assert await self.store.get("access:j1") is None
        assert await self.store.exists("access:j1") is False
        assert await self.store.delete("access:j1") is False

    @pytest.mark.asyncio
    async def test_entries_expire_after_ttl(self):
        await self.store.set("access:j1", "user-1", ttl=60)

        self.clock.now += 59
        assert await self.store.exists("access:j1") is True

        self.clock.now += 1
        assert await self.store.exists("access:j1") is False

    @pytest.mark.asyncio
    async def test_delete_of_expired_entry_removes_nothing(self):
        await self.store.set("refresh:j1", "user-1", ttl=60)
        self.clock.now += 60

        assert await self.store.delete("refresh:j1") is False

    @pytest.mark.asyncio
    async def test_set_without_ttl_never_expires(self):
        await self.store.set("k", "v")

        self.clock.now += 10**9

        assert await self.store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_set_membership(self):
        await self.store.add_to_set("user:1:sessions", "a")
        await self.store.add_to_set("user:1:sessions", "b")
        await self.store.add_to_set("user:1:sessions", "a")
        await self.store.remove_from_set("user:1:sessions", "b")
        await self.store.remove_from_set("user:1:sessions", "missing")

        assert await self.store.members_of("user:1:sessions") == {"a"}
        assert await self.store.members_of("user:2:sessions") == set()

    @pytest.mark.asyncio
    async def test_delete_removes_sets(self):
        await self.store.add_to_set("user:1:sessions", "a")

        assert await self.store.delete("user:1:sessions") is True

        assert await self.store.members_of("user:1:sessions") == set()

    @pytest.mark.asyncio
    async def test_unavailable_store_degrades(self):
        await self.store.set("access:j1", "user-1", ttl=60)
        await self.store.add_to_set("user:1:sessions", "j1")
        self.store.available = False

        await self.store.set("access:j2", "user-1", ttl=60)
        assert await self.store.delete("access:j1") is False

        assert await self.store.get("access:j1") is None
        assert await self.store.exists("access:j1") is False
        assert await self.store.members_of("user:1:sessions") == set()
        assert await self.store.is_available() is False

        self.store.available = True
        # writes made while unavailable were dropped, earlier data survives
        assert await self.store.exists("access:j1") is True
        assert await self.store.exists("access:j2") is False


class TestRedisSessionStore:
    def setup_method(self):
        self.client = AsyncMock()
        self.manager = MagicMock()
        self.manager.client = self.client
        self.manager.ensure_connected = AsyncMock(return_value=True)
        self.manager.ping = AsyncMock(return_value=True)
        self.store = RedisSessionStore(self.manager, operation_timeout=0.5)

    @pytest.mark.asyncio
    async def test_set_with_ttl(self):
        await self.store.set("access:j1", "user-1", ttl=900)

        self.client.set.assert_awaited_once_with("access:j1", "user-1", ex=900)

    @pytest.mark.asyncio
    async def test_set_without_ttl(self):
        await self.store.set("k", "v")

        self.client.set.assert_awaited_once_with("k", "v", ex=None)

    @pytest.mark.asyncio
    async def test_exists_returns_bool(self):
        self.client.exists.return_value = 1

        assert await self.store.exists("access:j1") is True
        self.client.exists.assert_awaited_once_with("access:j1")

    @pytest.mark.asyncio
    async def test_set_commands(self):
        self.client.smembers.return_value = {"a", "b"}

        await self.store.add_to_set("user:1:sessions", "a")
        await self.store.remove_from_set("user:1:sessions", "c")
        members = await self.store.members_of("user:1:sessions")

        self.client.sadd.assert_awaited_once_with("user:1:sessions", "a")
        self.client.srem.assert_awaited_once_with("user:1:sessions", "c")
        assert members == {"a", "b"}

    @pytest.mark.asyncio
    async def test_not_connected_skips_commands(self):
        self.manager.ensure_connected.return_value = False

        await self.store.set("access:j1", "user-1", ttl=900)
        assert await self.store.get("access:j1") is None
        assert await self.store.exists("access:j1") is False
        assert await self.store.members_of("user:1:sessions") == set()

        self.client.set.assert_not_awaited()
        self.client.exists.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_error_marks_unavailable(self):
        error = RedisConnectionError("connection refused")
        self.client.exists.side_effect = error

        assert await self.store.exists("access:j1") is False
        self.manager.mark_unavailable.assert_called_once_with(error)

    @pytest.mark.asyncio
    async def test_command_error_returns_default_without_outage(self):
        self.client.smembers.side_effect = ResponseError("WRONGTYPE")

        assert await self.store.members_of("user:1:sessions") == set()
        self.manager.mark_unavailable.assert_not_called()

    @pytest.mark.asyncio
    async def test_command_timeout_marks_unavailable(self):
        async def slow_exists(key):
            await asyncio.sleep(5)
            return 1

        self.client.exists.side_effect = slow_exists
        store = RedisSessionStore(self.manager, operation_timeout=0.01)

        assert await store.exists("access:j1") is False
        self.manager.mark_unavailable.assert_called_once()

    @pytest.mark.asyncio
    async def test_hung_server_is_skipped_after_first_timeout(self):
        async def hung_exists(key):
            await asyncio.sleep(60)
            return 1

        manager = RedisManager(connect_retries=0, reconnect_interval=30.0, connect_timeout=0.5)
        manager._client = self.client
        manager._pool = MagicMock()
        self.client.ping.return_value = True
        self.client.exists.side_effect = hung_exists
        store = RedisSessionStore(manager, operation_timeout=0.05)

        for _ in range(5):
            assert await store.exists("access:j1") is False

        assert self.client.exists.await_count == 1
        assert manager.state is ConnectionState.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_delete_reports_removal(self):
        self.client.delete.return_value = 1

        assert await self.store.delete("refresh:j1") is True

        self.client.delete.return_value = 0
        assert await self.store.delete("refresh:j1") is False

    @pytest.mark.asyncio
    async def test_delete_when_not_connected(self):
        self.manager.ensure_connected.return_value = False

        assert await self.store.delete("refresh:j1") is False
        self.client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_is_available_pings_manager(self):
        self.manager.ping.return_value = False

        assert await self.store.is_available() is False
        self.manager.ping.assert_awaited_once()
