"""
Response Models
--------------
Pydantic models for API response validation.
Simple, focused schemas for returning data to clients.
"""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from session_auth.models.users_model import User, UserRole


class CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# USER RESPONSE MODELS
# ============================================================================
class UserResponse(CamelResponse):
    """Response schema for user data - no sensitive info"""

    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
        )


class UserListResponse(CamelResponse):
    users: List[UserResponse]
    limit: int
    offset: int


# ============================================================================
# AUTH RESPONSE MODELS
# ============================================================================
class TokenPairResponse(CamelResponse):
    """Response schema for a refreshed token pair."""

    message: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class AuthResponse(TokenPairResponse):
    """Response schema for register and login."""

    user: UserResponse


class MessageResponse(CamelResponse):
    message: str


class LogoutAllResponse(MessageResponse):
    revoked_sessions: int


class SessionResponse(CamelResponse):
    """The session context of the presented access token."""

    user_id: UUID
    role: str
    jti: str


# ============================================================================
# HEALTH AND ERROR RESPONSE MODELS
# ============================================================================
class HealthStatus(BaseModel):
    """Service and dependency health."""

    status: Literal["ok", "degraded", "down"]
    uptime: int = Field(..., description="Seconds since startup")
    database: Literal["connected", "disconnected"]
    redis: Literal["connected", "disconnected"]
    version: str
    timestamp: datetime


class ErrorResponse(CamelResponse):
    """Error body returned for every handled failure."""

    status_code: int
    error: str
    message: str
    timestamp: datetime
    path: str
    request_id: Optional[str] = None
