"""
Health Endpoint Tests
=====================
ok / degraded / down classification from database and session store state.
"""

from unittest.mock import AsyncMock, patch

import pytest


class TestHealthEndpoint:
    @pytest.mark.parametrize(
        "database_ok, store_available, expected",
        [
            (True, True, "ok"),
            (True, False, "degraded"),
            (False, True, "down"),
            (False, False, "down"),
        ],
    )
    def test_status(self, client, session_store, database_ok, store_available, expected):
        session_store.available = store_available

        with patch(
            "session_auth.api.health_endpoints._check_database",
            AsyncMock(return_value=database_ok),
        ):
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == expected
        assert body["database"] == ("connected" if database_ok else "disconnected")
        assert body["redis"] == ("connected" if store_available else "disconnected")
        assert body["uptime"] >= 0
        assert "timestamp" in body
        assert "version" in body

    def test_store_check_error_counts_as_disconnected(self, client, api_app):
        api_app.state.session_store.is_available = AsyncMock(side_effect=RuntimeError("boom"))

        with patch(
            "session_auth.api.health_endpoints._check_database",
            AsyncMock(return_value=True),
        ):
            response = client.get("/health")

        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_database_check_failure_is_false(self):
        from session_auth.api.health_endpoints import _check_database

        with patch("session_auth.api.health_endpoints.db_manager") as mock_db:
            mock_db.get_session.side_effect = RuntimeError("Database not initialized")

            assert await _check_database() is False
