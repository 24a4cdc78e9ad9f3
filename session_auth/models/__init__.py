"""
Models Package
--------------
Pydantic models for the users table and the API request/response bodies.
"""

from session_auth.models.users_model import User, UserRole
from session_auth.models.request_models import (
    RegisterRequest,
    LoginRequest,
    RefreshRequest,
)
from session_auth.models.response_models import (
    UserResponse,
    UserListResponse,
    TokenPairResponse,
    AuthResponse,
    MessageResponse,
    LogoutAllResponse,
    SessionResponse,
    HealthStatus,
    ErrorResponse,
)

__all__ = [
    "User",
    "UserRole",
    "RegisterRequest",
    "LoginRequest",
    "RefreshRequest",
    "UserResponse",
    "UserListResponse",
    "TokenPairResponse",
    "AuthResponse",
    "MessageResponse",
    "LogoutAllResponse",
    "SessionResponse",
    "HealthStatus",
    "ErrorResponse",
]
