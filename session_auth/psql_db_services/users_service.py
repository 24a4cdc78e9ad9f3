"""
PostgreSQL CRUD Operations for Users
------------------------------------
Credential store for the auth core:
- user creation with unique email enforcement
- lookup by id and by email
- role updates (admin bootstrap) and deletion
- paginated listing for administrators
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from loguru import logger

from session_auth.core.database_connection import DatabaseManager
from session_auth.core.exceptions import ConflictError
from session_auth.models.users_model import User, UserRole
from session_auth.psql_db_services.base_service import BaseDatabaseService

USERS_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY,
        name VARCHAR(50) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        password_hash VARCHAR(255) NOT NULL,
        role VARCHAR(16) NOT NULL DEFAULT 'USER' CHECK (role IN ('ADMIN', 'USER')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
"""

USER_COLUMNS = "id, name, email, password_hash, role, created_at, updated_at"


class UsersService(BaseDatabaseService):
    """
    Database service for user records.

    Emails are stored lower-cased; uniqueness is enforced both by a lookup and
    by the table's UNIQUE constraint (which wins a concurrent registration race).
    """

    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    @staticmethod
    def _to_user(row: Optional[Dict[str, Any]]) -> Optional[User]:
        return User(**row) if row else None

    async def ensure_schema(self) -> None:
        """Create the users table if it does not exist yet."""
        async with self.get_session() as session:
            await session.execute(text(USERS_TABLE_DDL))
        logger.info("Users table verified")

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    async def check_email_exists(self, email: str) -> bool:
        """Check if email already exists in database"""
        try:
            async with self.get_session() as session:
                sql_query = "SELECT 1 FROM users WHERE email = :email LIMIT 1"
                result = await session.execute(
                    text(sql_query), {"email": email.strip().lower()}
                )
                return result.first() is not None
        except Exception as e:
            logger.error(f"Error checking email existence: {e}")
            raise

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        user_id: Optional[UUID] = None,
    ) -> User:
        """
        Create a new user record in the database.

        Args:
            name: Display name
            email: Email address (must be unique)
            password_hash: Hashed password
            role: User role. Defaults to USER
            user_id: Optional identifier, generated when omitted

        Returns:
            The created user

        Raises:
            ConflictError: If the email already exists
            sqlalchemy.exc.SQLAlchemyError: On database errors
        """
        self.validate_string_not_empty(name, "name")
        self.validate_string_not_empty(email, "email")
        email = email.strip().lower()

        if await self.check_email_exists(email):
            raise ConflictError("Email already exists")

        now = datetime.now(timezone.utc)
        params = {
            "id": user_id or uuid4(),
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "role": UserRole(role).value,
            "created_at": now,
            "updated_at": now,
        }

        try:
            async with self.get_session() as session:
                sql_query = f"""
                    INSERT INTO users ({USER_COLUMNS})
                    VALUES (:id, :name, :email, :password_hash, :role, :created_at, :updated_at)
                    RETURNING {USER_COLUMNS}
                """
                result = await session.execute(text(sql_query), params)
                created_user = result.mappings().one_or_none()

                if not created_user:
                    raise RuntimeError("Failed to create user record")

            self.log_operation("CREATE", params["id"])
            return self._to_user(dict(created_user))

        except IntegrityError:
            logger.warning(f"Concurrent registration for {email} rejected by unique constraint")
            raise ConflictError("Email already exists")
        except Exception as e:
            logger.error(f"Error creating user {email}: {e}")
            raise

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """
        Retrieve a user by their unique identifier.

        Returns:
            The user or None if not found
        """
        self.validate_uuid(user_id, "user_id")

        try:
            async with self.get_session() as session:
                sql_query = f"SELECT {USER_COLUMNS} FROM users WHERE id = :id"
                result = await session.execute(text(sql_query), {"id": user_id})
                user_record = result.mappings().one_or_none()
                return self._to_user(dict(user_record) if user_record else None)
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise

    async def get_user_by_email(self, email_address: str) -> Optional[User]:
        """
        Retrieve a user by their email address (case-insensitive).

        Returns:
            The user or None if not found
        """
        self.validate_string_not_empty(email_address, "email_address")

        try:
            async with self.get_session() as session:
                sql_query = f"SELECT {USER_COLUMNS} FROM users WHERE email = :email"
                result = await session.execute(
                    text(sql_query), {"email": email_address.strip().lower()}
                )
                user_record = result.mappings().one_or_none()
                return self._to_user(dict(user_record) if user_record else None)
        except Exception as e:
            logger.error(f"Error fetching user by email: {e}")
            raise

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        """Return users, newest first."""
        self.validate_pagination_parameters(limit, offset)

        rows = await self.execute_single_query(
            f"""
                SELECT {USER_COLUMNS} FROM users
                ORDER BY created_at DESC
                LIMIT :limit OFFSET :offset
            """,
            {"limit": limit, "offset": offset},
        )
        return [User(**row) for row in rows]

    # ========================================================================
    # UPDATE / DELETE OPERATIONS
    # ========================================================================

    async def update_user_role(self, user_id: UUID, role: UserRole) -> Optional[User]:
        """
        Change a user's role.

        Returns:
            The updated user or None if the user does not exist
        """
        self.validate_uuid(user_id, "user_id")

        async with self.get_session() as session:
            sql_query = f"""
                UPDATE users
                SET role = :role, updated_at = CURRENT_TIMESTAMP
                WHERE id = :id
                RETURNING {USER_COLUMNS}
            """
            result = await session.execute(
                text(sql_query), {"id": user_id, "role": UserRole(role).value}
            )
            user_record = result.mappings().one_or_none()

        self.log_operation(
            "UPDATE", user_id, success=user_record is not None, additional_context=f"role={role}"
        )
        return self._to_user(dict(user_record) if user_record else None)

    async def delete_user(self, user_id: UUID) -> bool:
        """
        Delete a user by id.

        Returns:
            True if a row was deleted
        """
        self.validate_uuid(user_id, "user_id")

        async with self.get_session() as session:
            result = await session.execute(
                text("DELETE FROM users WHERE id = :id"), {"id": user_id}
            )
            deleted = result.rowcount > 0

        self.log_operation("DELETE", user_id, success=deleted)
        return deleted
