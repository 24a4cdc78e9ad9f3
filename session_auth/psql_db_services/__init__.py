"""
Database Services Package
-------------------------
PostgreSQL services for the session auth service.

This package provides:
- Base service class with shared session management, validation and logging
- User management service (the credential store behind registration and login)
"""

from session_auth.psql_db_services.base_service import BaseDatabaseService
from session_auth.psql_db_services.users_service import UsersService

__all__ = [
    "BaseDatabaseService",
    "UsersService",
]
