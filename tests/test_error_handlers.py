"""
Exception Handler and Request Context Tests
===========================================
JSON error shape, status mapping and correlation ids.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from session_auth.core.error_handlers import register_exception_handlers
from session_auth.core.exceptions import (
    AccountNotFoundError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from session_auth.core.request_context import REQUEST_ID_HEADER, RequestContextMiddleware


@pytest.fixture
def client():
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, log_requests=True)
    register_exception_handlers(app)

    errors = {
        "conflict": ConflictError("Email already exists"),
        "unauthorized": UnauthorizedError("Invalid credentials"),
        "account": AccountNotFoundError("Invalid or expired refresh token"),
        "forbidden": ForbiddenError("Insufficient permissions"),
        "missing": NotFoundError("User not found"),
    }

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise errors[name]

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret stack detail")

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    return TestClient(app, raise_server_exceptions=False)


class TestErrorHandlers:
    @pytest.mark.parametrize(
        "name, status_code, kind",
        [
            ("conflict", 409, "conflict"),
            ("unauthorized", 401, "unauthorized"),
            ("account", 401, "unauthorized"),
            ("forbidden", 403, "forbidden"),
            ("missing", 404, "not_found"),
        ],
    )
    def test_service_errors(self, client, name, status_code, kind):
        response = client.get(f"/raise/{name}")

        assert response.status_code == status_code
        body = response.json()
        assert body["statusCode"] == status_code
        assert body["error"] == kind
        assert body["path"] == f"/raise/{name}"
        assert body["timestamp"]
        assert body["requestId"] == response.headers[REQUEST_ID_HEADER]

    def test_unauthorized_sets_challenge_header(self, client):
        response = client.get("/raise/unauthorized")

        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unexpected_error_is_opaque(self, client):
        response = client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_error"
        assert body["message"] == "Internal server error"
        assert "secret stack detail" not in response.text


class TestRequestContext:
    def test_generates_request_id(self, client):
        response = client.get("/ok")

        assert len(response.headers[REQUEST_ID_HEADER]) == 36

    def test_keeps_inbound_request_id(self, client):
        response = client.get("/ok", headers={REQUEST_ID_HEADER: "abc-123"})

        assert response.headers[REQUEST_ID_HEADER] == "abc-123"

    def test_truncates_oversized_request_id(self, client):
        response = client.get("/ok", headers={REQUEST_ID_HEADER: "x" * 500})

        assert response.headers[REQUEST_ID_HEADER] == "x" * 128
