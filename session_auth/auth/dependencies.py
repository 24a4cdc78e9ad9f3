"""
FastAPI Authentication Dependencies
-----------------------------------
Dependencies exposing the auth components composed at startup
(``app.state``) and protecting endpoints with the request authenticator.

Role hierarchy: ADMIN > USER
"""

from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from loguru import logger

from session_auth.auth.auth_service import AuthService, CredentialStore
from session_auth.auth.authenticator import RequestAuthenticator
from session_auth.auth.models import SessionContext
from session_auth.core.exceptions import ForbiddenError
from session_auth.core.request_context import get_request_id
from session_auth.models.users_model import UserRole

# OAuth2 scheme for extracting Bearer tokens from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/login",
    auto_error=False,  # Don't auto-raise 401, the authenticator decides
)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_authenticator(request: Request) -> RequestAuthenticator:
    return request.app.state.authenticator


def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store


async def get_current_session(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
) -> SessionContext:
    """
    Authenticate the bearer token of the current request.

    Returns:
        SessionContext: user id, role and token id of the caller

    Raises:
        UnauthorizedError: If the token is missing, invalid, expired or revoked
    """
    session = await authenticator.authenticate(token, correlation_id=get_request_id(request))
    request.state.session = session
    return session


class RoleChecker:
    """
    Dependency class for role-based authorization on top of the session context.

    Usage:
        require_admin = RoleChecker([UserRole.ADMIN])
        @router.get("/admin-only", dependencies=[Depends(require_admin)])
    """

    def __init__(self, allowed_roles: Iterable[UserRole]):
        self.allowed_roles = frozenset(UserRole(role).value for role in allowed_roles)

    def __call__(
        self, session: SessionContext = Depends(get_current_session)
    ) -> SessionContext:
        if session.role not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {session.user_id} with role {session.role}"
            )
            raise ForbiddenError(
                f"Insufficient permissions. Required roles: {', '.join(sorted(self.allowed_roles))}"
            )
        return session


require_admin = RoleChecker([UserRole.ADMIN])
require_user = RoleChecker([UserRole.USER, UserRole.ADMIN])
