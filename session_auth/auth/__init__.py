"""
Authentication & Session Module
-------------------------------
Signed bearer token pairs backed by a revocable allowlist.

Core Components:
- token_codec: signs/verifies access and refresh JWTs (independent secrets)
- session_store: allowlist and per-user session sets (Redis or in-memory)
- auth_service: register, login, refresh rotation, logout, logout-all
- authenticator: bearer token -> SessionContext (signature, then allowlist)
- dependencies: FastAPI dependencies and role checks

Usage:
    from session_auth.auth import get_current_session, SessionContext

    @router.get("/protected")
    async def protected(session: SessionContext = Depends(get_current_session)):
        return {"user_id": session.user_id, "role": session.role}
"""

from session_auth.auth.models import (
    AuthResult,
    IssuedToken,
    SessionContext,
    TokenKind,
    TokenPair,
    TokenPayload,
)
from session_auth.auth.token_codec import (
    InvalidTokenSignatureError,
    TokenCodec,
    TokenExpiredError,
    TokenVerificationError,
)
from session_auth.auth.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
    allowlist_key,
    user_sessions_key,
)
from session_auth.auth.role_policy import RolePolicy
from session_auth.auth.auth_service import AuthService, CredentialStore
from session_auth.auth.authenticator import RequestAuthenticator
from session_auth.auth.dependencies import (
    RoleChecker,
    get_auth_service,
    get_authenticator,
    get_credential_store,
    get_current_session,
    require_admin,
    require_user,
)

__all__ = [
    "AuthResult",
    "IssuedToken",
    "SessionContext",
    "TokenKind",
    "TokenPair",
    "TokenPayload",
    "InvalidTokenSignatureError",
    "TokenCodec",
    "TokenExpiredError",
    "TokenVerificationError",
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "allowlist_key",
    "user_sessions_key",
    "RolePolicy",
    "AuthService",
    "CredentialStore",
    "RequestAuthenticator",
    "RoleChecker",
    "get_auth_service",
    "get_authenticator",
    "get_credential_store",
    "get_current_session",
    "require_admin",
    "require_user",
]
