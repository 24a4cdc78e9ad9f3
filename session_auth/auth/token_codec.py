"""
Token Codec
-----------
Signs and verifies access/refresh JWTs.

Security notes:
- python-jose (HS256 by default) for all cryptographic operations
- Access and refresh tokens use independent secrets and lifetimes, so a leaked
  access secret cannot forge refresh tokens
- The kind is also embedded as the ``type`` claim and checked on verify
- Every issued token gets a fresh random jti (UUID4)
- Verification is purely cryptographic; allowlist checks happen afterwards
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from uuid import UUID, uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger

from session_auth.auth.models import IssuedToken, TokenKind, TokenPayload
from session_auth.core.config_manager import ApplicationSettings

REQUIRED_CLAIMS = ("sub", "role", "jti", "type", "iat", "exp")


class TokenVerificationError(Exception):
    """Base class for stateless token verification failures."""


class InvalidTokenSignatureError(TokenVerificationError):
    """Bad signature, malformed token, missing claims or wrong token kind."""


class TokenExpiredError(TokenVerificationError):
    """Valid signature, but the token's expiry has passed."""


class TokenCodec:
    """Issues and verifies signed bearer tokens for both token kinds."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl_seconds: int,
        refresh_ttl_seconds: int,
        algorithm: str = "HS256",
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._secrets = {
            TokenKind.ACCESS: access_secret,
            TokenKind.REFRESH: refresh_secret,
        }
        self._ttls = {
            TokenKind.ACCESS: access_ttl_seconds,
            TokenKind.REFRESH: refresh_ttl_seconds,
        }
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: ApplicationSettings) -> "TokenCodec":
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
            algorithm=settings.jwt_algorithm,
        )

    def ttl_for(self, kind: TokenKind) -> int:
        """Configured lifetime of a token kind, in seconds."""
        return self._ttls[kind]

    def issue(
        self,
        user_id: Union[UUID, str],
        role: str,
        kind: TokenKind,
        ttl_seconds: Optional[int] = None,
    ) -> IssuedToken:
        """
        Create a signed token with a fresh jti.

        Args:
            user_id: Token subject
            role: User role at issuance time
            kind: ACCESS or REFRESH, selects secret and default lifetime
            ttl_seconds: Optional lifetime override

        Returns:
            IssuedToken: the encoded token with its jti and expiry
        """
        ttl = self._ttls[kind] if ttl_seconds is None else ttl_seconds
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=ttl)
        jti = str(uuid4())

        payload = {
            "sub": str(user_id),
            "role": role,
            "jti": jti,
            "type": kind.value,
            "iat": issued_at,
            "exp": expires_at,
        }

        try:
            token = jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)
        except JWTError as e:
            logger.error(f"Failed to create {kind.value} token: {e}")
            raise

        logger.debug(f"{kind.value.capitalize()} token issued for user {user_id} (jti={jti})")
        return IssuedToken(token=token, jti=jti, expires_at=expires_at, ttl_seconds=ttl)

    def verify(self, token: str, kind: TokenKind) -> TokenPayload:
        """
        Verify signature and expiry of a token of the given kind.

        Raises:
            TokenExpiredError: signature valid but token expired
            InvalidTokenSignatureError: anything else wrong with the token
        """
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={f"require_{claim}": True for claim in ("sub", "jti", "iat", "exp")},
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError(f"{kind.value} token expired") from e
        except JWTError as e:
            raise InvalidTokenSignatureError(f"Invalid {kind.value} token: {e}") from e

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in claims]
        if missing:
            raise InvalidTokenSignatureError(
                f"Token missing claims: {', '.join(missing)}"
            )

        if claims["type"] != kind.value:
            raise InvalidTokenSignatureError(
                f"Token type mismatch. Expected '{kind.value}', got '{claims['type']}'"
            )

        try:
            return TokenPayload(
                user_id=UUID(claims["sub"]),
                role=claims["role"],
                jti=claims["jti"],
                kind=kind,
                issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
            )
        except (ValueError, TypeError) as e:
            raise InvalidTokenSignatureError(f"Invalid token payload: {e}") from e
