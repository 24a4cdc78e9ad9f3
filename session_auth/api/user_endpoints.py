"""
User Endpoints
--------------
Profile access for the authenticated user and user lookup for administrators.
Deleting an account also revokes all of its sessions.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from session_auth.auth.auth_service import AuthService, CredentialStore
from session_auth.auth.dependencies import (
    get_auth_service,
    get_credential_store,
    get_current_session,
    require_admin,
    require_user,
)
from session_auth.auth.models import SessionContext
from session_auth.core.exceptions import AccountNotFoundError, ForbiddenError, NotFoundError
from session_auth.core.request_context import get_request_id
from session_auth.models.response_models import (
    MessageResponse,
    UserListResponse,
    UserResponse,
)
from session_auth.models.users_model import UserRole

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse, summary="Get own profile")
async def get_profile(
    session: SessionContext = Depends(get_current_session),
    credential_store: CredentialStore = Depends(get_credential_store),
):
    user = await credential_store.get_user_by_id(session.user_id)
    if user is None:
        raise AccountNotFoundError("Invalid or expired token")
    return UserResponse.from_user(user)


@router.delete("/me", response_model=MessageResponse, summary="Delete own account")
async def delete_profile(
    request: Request,
    session: SessionContext = Depends(get_current_session),
    credential_store: CredentialStore = Depends(get_credential_store),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Delete the caller's account, then revoke every token issued to it."""
    await credential_store.delete_user(session.user_id)
    await auth_service.logout_all(session.user_id, correlation_id=get_request_id(request))
    logger.info(f"Account deleted by owner: user_id={session.user_id}")
    return MessageResponse(message="Account deleted")


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users (admin only)",
)
async def list_users(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    session: SessionContext = Depends(require_admin),
    credential_store: CredentialStore = Depends(get_credential_store),
):
    users = await credential_store.list_users(limit=limit, offset=offset)
    return UserListResponse(
        users=[UserResponse.from_user(user) for user in users], limit=limit, offset=offset
    )


@router.get("/{user_id}", response_model=UserResponse, summary="Get user by ID")
async def get_user(
    user_id: UUID,
    session: SessionContext = Depends(require_user),
    credential_store: CredentialStore = Depends(get_credential_store),
):
    """Users may read their own record; administrators may read any."""
    if session.role != UserRole.ADMIN.value and session.user_id != user_id:
        raise ForbiddenError("You can only access your own profile")

    user = await credential_store.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return UserResponse.from_user(user)
