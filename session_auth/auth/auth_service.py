"""
Auth Orchestrator
-----------------
Coordinates the credential store, password hasher, token codec and session
store to implement register / login / refresh / logout / logout-all.

Consistency model:
- No multi-key transactions. Issuing a pair is four independent writes; a
  refresh is delete-then-issue. A crash in between leaves the user without a
  refresh token (re-login), never with an extra valid one.
- The allowlist delete is the one-time-use gate for refresh: of two concurrent
  refreshes of one token only the one whose delete removed the entry rotates.
- Refresh rotates the refresh token only. The access token issued alongside
  the old refresh token stays valid until it expires.
- The per-user session set never expires and may hold jti whose allowlist
  entry is already gone; logout-all on such a jti is a no-op.
"""

import asyncio
from typing import List, Optional, Protocol
from uuid import UUID

from loguru import logger

from session_auth.auth.models import (
    AuthResult,
    SessionContext,
    TokenKind,
    TokenPair,
)
from session_auth.auth.role_policy import RolePolicy
from session_auth.auth.session_store import (
    SessionStore,
    allowlist_key,
    user_sessions_key,
)
from session_auth.auth.token_codec import (
    TokenCodec,
    TokenExpiredError,
    TokenVerificationError,
)
from session_auth.core.exceptions import (
    AccountNotFoundError,
    ConflictError,
    UnauthorizedError,
)
from session_auth.core.logger_setup import bind_request_id
from session_auth.models.users_model import User, UserRole

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


class CredentialStore(Protocol):
    async def get_user_by_email(self, email_address: str) -> Optional[User]: ...

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]: ...

    async def create_user(
        self, name: str, email: str, password_hash: str, role: UserRole = UserRole.USER
    ) -> User: ...

    async def delete_user(self, user_id: UUID) -> bool: ...

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]: ...


class PasswordHashing(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, password: str, hashed_password: str) -> bool: ...

    def burn_verification(self, password: str) -> None: ...


class AuthService:
    """Session lifecycle operations over injected collaborators."""

    def __init__(
        self,
        credential_store: CredentialStore,
        password_hasher: PasswordHashing,
        token_codec: TokenCodec,
        session_store: SessionStore,
        role_policy: Optional[RolePolicy] = None,
    ):
        self.credential_store = credential_store
        self.password_hasher = password_hasher
        self.token_codec = token_codec
        self.session_store = session_store
        self.role_policy = role_policy or RolePolicy()

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        correlation_id: Optional[str] = None,
    ) -> AuthResult:
        """
        Create an account and log it in.

        Raises:
            ConflictError: If the email is already registered
        """
        log = bind_request_id(correlation_id)
        email = email.strip().lower()

        if await self.credential_store.get_user_by_email(email) is not None:
            log.info(f"Registration rejected: email already registered ({email})")
            raise ConflictError("Email already exists")

        # bcrypt is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(
            self.password_hasher.hash_password, password
        )
        role = self.role_policy.role_for_new_user(email)
        user = await self.credential_store.create_user(
            name=name, email=email, password_hash=password_hash, role=role
        )

        tokens = await self.issue_token_pair(user.id, user.role)
        log.info(f"User registered: user_id={user.id}, role={user.role.value}")
        return AuthResult(user=user, tokens=tokens)

    async def login(
        self, email: str, password: str, correlation_id: Optional[str] = None
    ) -> AuthResult:
        """
        Authenticate by email and password and issue a token pair.

        Unknown email and wrong password fail identically, in error and in
        bcrypt work performed.

        Raises:
            UnauthorizedError: On any credential mismatch
        """
        log = bind_request_id(correlation_id)
        user = await self.credential_store.get_user_by_email(email.strip().lower())

        if user is None:
            await asyncio.to_thread(self.password_hasher.burn_verification, password)
            log.info("Login failed: invalid credentials")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        password_ok = await asyncio.to_thread(
            self.password_hasher.verify_password, password, user.password_hash
        )
        if not password_ok:
            log.info("Login failed: invalid credentials")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        tokens = await self.issue_token_pair(user.id, user.role)
        log.info(f"Login successful: user_id={user.id}")
        return AuthResult(user=user, tokens=tokens)

    async def issue_token_pair(self, user_id: UUID, role: UserRole) -> TokenPair:
        """
        Sign an access/refresh pair and record both in the session store.

        Returns only after both allowlist entries and both session-set members
        have been written (or skipped, if the store is unavailable).
        """
        role_value = UserRole(role).value
        access = self.token_codec.issue(user_id, role_value, TokenKind.ACCESS)
        refresh = self.token_codec.issue(user_id, role_value, TokenKind.REFRESH)
        sessions_key = user_sessions_key(user_id)

        await asyncio.gather(
            self.session_store.set(
                allowlist_key(TokenKind.ACCESS, access.jti), str(user_id), access.ttl_seconds
            ),
            self.session_store.set(
                allowlist_key(TokenKind.REFRESH, refresh.jti),
                str(user_id),
                refresh.ttl_seconds,
            ),
            self.session_store.add_to_set(sessions_key, access.jti),
            self.session_store.add_to_set(sessions_key, refresh.jti),
        )

        logger.debug(
            f"Token pair issued for user {user_id}: access_jti={access.jti}, refresh_jti={refresh.jti}"
        )
        return TokenPair(
            access_token=access.token,
            refresh_token=refresh.token,
            access_jti=access.jti,
            refresh_jti=refresh.jti,
            expires_in=access.ttl_seconds,
        )

    async def refresh(
        self, refresh_token: str, correlation_id: Optional[str] = None
    ) -> TokenPair:
        """
        Exchange a refresh token for a new pair. Each refresh token works once.

        Raises:
            UnauthorizedError: Invalid, expired, revoked or already used token
            AccountNotFoundError: The token's user no longer exists
        """
        log = bind_request_id(correlation_id)

        try:
            payload = self.token_codec.verify(refresh_token, TokenKind.REFRESH)
        except TokenExpiredError:
            log.info("Refresh rejected: token expired")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)
        except TokenVerificationError as e:
            log.info(f"Refresh rejected: {e}")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        # Only the caller whose delete removed the entry may rotate it
        refresh_key = allowlist_key(TokenKind.REFRESH, payload.jti)
        if not await self.session_store.delete(refresh_key):
            log.info(f"Refresh rejected: token revoked or already used (jti={payload.jti})")
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)
        await self.session_store.remove_from_set(
            user_sessions_key(payload.user_id), payload.jti
        )

        user = await self.credential_store.get_user_by_id(payload.user_id)
        if user is None:
            log.warning(f"Refresh rejected: user {payload.user_id} no longer exists")
            raise AccountNotFoundError(INVALID_REFRESH_TOKEN)

        tokens = await self.issue_token_pair(user.id, user.role)
        log.info(f"Refresh token rotated for user {user.id} (old jti={payload.jti})")
        return tokens

    async def logout(
        self, session: SessionContext, correlation_id: Optional[str] = None
    ) -> None:
        """Revoke the access token of one session. Its refresh token is untouched."""
        await asyncio.gather(
            self.session_store.delete(allowlist_key(TokenKind.ACCESS, session.jti)),
            self.session_store.remove_from_set(
                user_sessions_key(session.user_id), session.jti
            ),
        )
        bind_request_id(correlation_id).info(
            f"Logout: access token revoked for user {session.user_id} (jti={session.jti})"
        )

    async def logout_all(
        self, user_id: UUID, correlation_id: Optional[str] = None
    ) -> int:
        """
        Revoke every access and refresh token recorded for a user.

        Returns:
            Number of token ids found in the user's session set
        """
        sessions_key = user_sessions_key(user_id)
        jtis = await self.session_store.members_of(sessions_key)

        deletions = [
            self.session_store.delete(allowlist_key(kind, jti))
            for jti in jtis
            for kind in TokenKind
        ]
        deletions.append(self.session_store.delete(sessions_key))
        await asyncio.gather(*deletions)

        bind_request_id(correlation_id).info(
            f"Logout-all: {len(jtis)} session token(s) revoked for user {user_id}"
        )
        return len(jtis)
