"""
Request Models
==============

Pydantic request models for the authentication endpoints.
Field names are exposed to clients in camelCase (``refreshToken``).
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from session_auth.utils.passwrd_hashing import MAX_PASSWORD_BYTES


def check_password_bytes(v: str) -> str:
    # bcrypt only accepts up to 72 bytes of input
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )
    return v


class CamelModel(BaseModel):
    """Base model accepting both camelCase aliases and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Request model for creating an account."""

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr = Field(...)
    password: str = Field(..., min_length=8, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be between 2 and 50 characters long")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: EmailStr) -> EmailStr:
        return v.lower().strip()

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return check_password_bytes(v)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Alice Johnson",
                "email": "alice@example.com",
                "password": "SecurePass123",
            }
        },
    )


class LoginRequest(CamelModel):
    """Request model for email/password login."""

    email: EmailStr = Field(...)
    password: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: EmailStr) -> EmailStr:
        return v.lower().strip()

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        return check_password_bytes(v)


class RefreshRequest(CamelModel):
    """Request model for exchanging a refresh token for a new token pair."""

    refresh_token: str = Field(..., min_length=1, description="Valid refresh token")
