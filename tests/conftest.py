"""
Pytest configuration for Session Auth Service tests.
Sets up the Python path, test environment variables and common fixtures.
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest

# Add the project root to Python path for all tests
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "mydb")
os.environ.setdefault("DATABASE_USER", "myuser")
os.environ.setdefault("DATABASE_PASSWORD", "mypassword")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghijkl")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghijk")
os.environ.setdefault("LOG_REQUESTS", "false")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from session_auth.api import auth_endpoints, health_endpoints, user_endpoints  # noqa: E402
from session_auth.auth.auth_service import AuthService  # noqa: E402
from session_auth.auth.authenticator import RequestAuthenticator  # noqa: E402
from session_auth.auth.role_policy import RolePolicy  # noqa: E402
from session_auth.auth.session_store import MemorySessionStore  # noqa: E402
from session_auth.auth.token_codec import TokenCodec  # noqa: E402
from session_auth.core.error_handlers import register_exception_handlers  # noqa: E402
from session_auth.core.exceptions import ConflictError  # noqa: E402
from session_auth.core.request_context import RequestContextMiddleware  # noqa: E402
from session_auth.models.users_model import User, UserRole  # noqa: E402
from session_auth.utils.passwrd_hashing import PasswordHasher  # noqa: E402

ACCESS_SECRET = "unit-access-secret-abcdefghijklmnopqrstuvwxyz"
REFRESH_SECRET = "unit-refresh-secret-abcdefghijklmnopqrstuvwxyz"
ADMIN_EMAIL = "root@example.com"


class InMemoryCredentialStore:
    """Credential store fake with the same contract as ``UsersService``."""

    def __init__(self):
        self.users: Dict[UUID, User] = {}

    async def get_user_by_email(self, email_address: str) -> Optional[User]:
        email_address = email_address.strip().lower()
        for user in self.users.values():
            if user.email == email_address:
                return user
        return None

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return self.users.get(user_id)

    async def create_user(
        self, name: str, email: str, password_hash: str, role: UserRole = UserRole.USER
    ) -> User:
        if await self.get_user_by_email(email) is not None:
            raise ConflictError("Email already exists")
        now = datetime.now(timezone.utc)
        user = User(
            id=uuid4(),
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
            created_at=now,
            updated_at=now,
        )
        self.users[user.id] = user
        return user

    async def delete_user(self, user_id: UUID) -> bool:
        return self.users.pop(user_id, None) is not None

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        return list(self.users.values())[offset : offset + limit]


# ============================================================================
# AUTH CORE FIXTURES
# ============================================================================


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture(scope="session")
def password_hasher():
    """Low-cost bcrypt hasher so tests stay fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_codec():
    return TokenCodec(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl_seconds=15 * 60,
        refresh_ttl_seconds=7 * 24 * 60 * 60,
    )


@pytest.fixture
def auth_service(credential_store, password_hasher, token_codec, session_store):
    return AuthService(
        credential_store=credential_store,
        password_hasher=password_hasher,
        token_codec=token_codec,
        session_store=session_store,
        role_policy=RolePolicy(admin_emails=[ADMIN_EMAIL]),
    )


@pytest.fixture
def authenticator(token_codec, session_store):
    return RequestAuthenticator(token_codec, session_store)


# ============================================================================
# API FIXTURES
# ============================================================================


@pytest.fixture
def api_app(auth_service, authenticator, credential_store, session_store):
    """FastAPI app with all routers wired to the in-memory auth core."""
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware, log_requests=False)
    register_exception_handlers(app)
    app.include_router(health_endpoints.router)
    app.include_router(auth_endpoints.router)
    app.include_router(user_endpoints.router)

    app.state.auth_service = auth_service
    app.state.authenticator = authenticator
    app.state.credential_store = credential_store
    app.state.session_store = session_store
    return app


@pytest.fixture
def client(api_app):
    """Create test client for the FastAPI app (lifespan is not run)."""
    return TestClient(api_app, raise_server_exceptions=False)
