"""
Request Authenticator
---------------------
Turns a bearer access token into a ``SessionContext``.

Two checks, in order:
1. signature and expiry against the access secret (stateless)
2. allowlist membership of ``access:{jti}`` in the session store

Every failure is the same ``UnauthorizedError`` for the client; the log line
says which check failed. A store that cannot be reached answers "not found",
so requests fail closed.
"""

from typing import Optional

from session_auth.auth.models import SessionContext, TokenKind
from session_auth.auth.session_store import SessionStore, allowlist_key
from session_auth.auth.token_codec import (
    TokenCodec,
    TokenExpiredError,
    TokenVerificationError,
)
from session_auth.core.exceptions import UnauthorizedError
from session_auth.core.logger_setup import bind_request_id

INVALID_TOKEN = "Invalid or expired token"


class RequestAuthenticator:
    def __init__(self, token_codec: TokenCodec, session_store: SessionStore):
        self.token_codec = token_codec
        self.session_store = session_store

    async def authenticate(
        self, bearer_token: Optional[str], correlation_id: Optional[str] = None
    ) -> SessionContext:
        """
        Verify a bearer access token and return the caller's session context.

        Raises:
            UnauthorizedError: Missing, malformed, expired or revoked token
        """
        log = bind_request_id(correlation_id)

        if not bearer_token:
            log.info("Authentication failed: missing bearer token")
            raise UnauthorizedError("Authorization token required")

        try:
            payload = self.token_codec.verify(bearer_token, TokenKind.ACCESS)
        except TokenExpiredError:
            log.info("Authentication failed: access token expired")
            raise UnauthorizedError(INVALID_TOKEN)
        except TokenVerificationError as e:
            log.info(f"Authentication failed: malformed or forged token ({e})")
            raise UnauthorizedError(INVALID_TOKEN)

        if not await self.session_store.exists(allowlist_key(TokenKind.ACCESS, payload.jti)):
            log.info(
                f"Authentication failed: token revoked or session store unavailable "
                f"(jti={payload.jti})"
            )
            raise UnauthorizedError(INVALID_TOKEN)

        log.debug(f"Token validated for user {payload.user_id} with role {payload.role}")
        return SessionContext(user_id=payload.user_id, role=payload.role, jti=payload.jti)
