from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """User roles for role-based access control"""

    ADMIN = "ADMIN"
    USER = "USER"


class User(BaseModel):
    """
    Pydantic model for the 'users' table.

    Holds the password hash, so it never leaves the service layer as-is;
    endpoints convert it to ``UserResponse``.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Unique, stable user identifier")
    name: str = Field(..., description="Display name", max_length=50)
    email: str = Field(..., description="Unique email address (lower-cased)")
    password_hash: str = Field(..., description="bcrypt password hash")
    role: UserRole = Field(default=UserRole.USER, description="User role")
    created_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the user's creation"
    )
    updated_at: Optional[datetime] = Field(
        default=None, description="Timestamp of the user's last update"
    )
