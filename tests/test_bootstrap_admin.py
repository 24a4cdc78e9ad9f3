"""
Admin Bootstrap Script Tests
============================
Promotion of an existing account with the database layer mocked out.
"""

import importlib.util
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from session_auth.models.users_model import User, UserRole

SCRIPT_PATH = Path(__file__).resolve().parent.parent / "scripts" / "bootstrap_admin.py"


def load_script():
    spec = importlib.util.spec_from_file_location("bootstrap_admin", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def make_user(role=UserRole.USER):
    return User(
        id=uuid4(),
        name="Alice",
        email="alice@example.com",
        password_hash="$2b$04$hash",
        role=role,
    )


@pytest.fixture
def mocked_db():
    db = MagicMock()
    db.initialize = AsyncMock()
    db.close = AsyncMock()
    users_service = MagicMock()
    users_service.get_user_by_email = AsyncMock()
    users_service.update_user_role = AsyncMock()

    with patch("session_auth.core.database_connection.db_manager", db), patch(
        "session_auth.psql_db_services.users_service.UsersService",
        MagicMock(return_value=users_service),
    ):
        yield db, users_service


class TestBootstrapAdmin:
    @pytest.mark.asyncio
    async def test_promotes_existing_user(self, mocked_db):
        db, users_service = mocked_db
        user = make_user()
        users_service.get_user_by_email.return_value = user

        result = await load_script().bootstrap_admin("alice@example.com")

        assert result["status"] == "promoted"
        users_service.update_user_role.assert_awaited_once_with(user.id, UserRole.ADMIN)
        db.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dry_run_changes_nothing(self, mocked_db):
        _, users_service = mocked_db
        users_service.get_user_by_email.return_value = make_user()

        result = await load_script().bootstrap_admin("alice@example.com", dry_run=True)

        assert result["status"] == "dry_run"
        users_service.update_user_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_admin(self, mocked_db):
        _, users_service = mocked_db
        users_service.get_user_by_email.return_value = make_user(role=UserRole.ADMIN)

        result = await load_script().bootstrap_admin("alice@example.com")

        assert result["status"] == "already_admin"
        users_service.update_user_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_email(self, mocked_db):
        _, users_service = mocked_db
        users_service.get_user_by_email.return_value = None

        result = await load_script().bootstrap_admin("ghost@example.com")

        assert result["status"] == "not_found"
