"""
Auth Core Models
----------------
Value types exchanged between the token codec, the session store, the auth
orchestrator and the request authenticator.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from session_auth.models.users_model import User


class TokenKind(str, Enum):
    """Token kinds. The value doubles as the allowlist key namespace."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenPayload(BaseModel):
    """
    Verified JWT payload.

    Only produced by ``TokenCodec.verify``; its presence means the signature
    and expiry were valid, not that the token is still allowlisted.
    """

    user_id: UUID = Field(..., description="Token subject (sub claim)")
    role: str = Field(..., description="Role at issuance time")
    jti: str = Field(..., description="Unique token id")
    kind: TokenKind = Field(..., description="access or refresh (type claim)")
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime
    ttl_seconds: int


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    access_jti: str
    refresh_jti: str
    expires_in: int


@dataclass(frozen=True)
class AuthResult:
    """Outcome of register/login: the account plus a fresh token pair."""

    user: User
    tokens: TokenPair


@dataclass(frozen=True)
class SessionContext:
    """Authenticated caller, handed to downstream authorization."""

    user_id: UUID
    role: str
    jti: str
