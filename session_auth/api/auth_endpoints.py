"""
Authentication Endpoints
------------------------
Register, login, refresh, logout and logout-all.
Failures are raised as service errors and rendered by the global exception
handlers; every 401 has the same shape regardless of which check failed.
"""

from fastapi import APIRouter, Depends, Request, status
from loguru import logger

from session_auth.auth.auth_service import AuthService
from session_auth.auth.dependencies import get_auth_service, get_current_session
from session_auth.auth.models import AuthResult, SessionContext, TokenPair
from session_auth.core.request_context import get_request_id
from session_auth.models.request_models import LoginRequest, RefreshRequest, RegisterRequest
from session_auth.models.response_models import (
    AuthResponse,
    LogoutAllResponse,
    MessageResponse,
    SessionResponse,
    TokenPairResponse,
    UserResponse,
)

# ============================================================================
# ROUTER INITIALIZATION
# ============================================================================

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserResponse.from_user(result.user),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        expires_in=result.tokens.expires_in,
    )


def _token_pair_response(message: str, tokens: TokenPair) -> TokenPairResponse:
    return TokenPairResponse(
        message=message,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


# ============================================================================
# AUTHENTICATION ENDPOINTS
# ============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create an account and return it together with a fresh token pair.",
)
async def register(
    body: RegisterRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Register a new user.

    Raises:
        ConflictError (409): If the email already exists
    """
    logger.info(f"Registration attempt for email: {body.email}")
    result = await auth_service.register(
        body.name, body.email, body.password, correlation_id=get_request_id(request)
    )
    return _auth_response("User registered successfully", result)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate with email and password",
)
async def login(
    body: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate user with email and password and return a token pair.

    Raises:
        UnauthorizedError (401): Unknown email or wrong password
    """
    logger.info(f"Login attempt for email: {body.email}")
    result = await auth_service.login(
        body.email, body.password, correlation_id=get_request_id(request)
    )
    return _auth_response("Login successful", result)


@router.post(
    "/refresh",
    response_model=TokenPairResponse,
    summary="Rotate a refresh token",
    description="""
    Exchange a refresh token for a new access/refresh pair.

    Each refresh token can be used once; replaying it fails with 401.
    The access token issued with the old refresh token stays valid until it expires.
    """,
)
async def refresh(
    body: RefreshRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    tokens = await auth_service.refresh(
        body.refresh_token, correlation_id=get_request_id(request)
    )
    return _token_pair_response("Tokens refreshed successfully", tokens)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the presented access token",
)
async def logout(
    request: Request,
    session: SessionContext = Depends(get_current_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.logout(session, correlation_id=get_request_id(request))
    return MessageResponse(message="Logout successful")


@router.post(
    "/logout-all",
    response_model=LogoutAllResponse,
    summary="Revoke every session of the current user",
)
async def logout_all(
    request: Request,
    session: SessionContext = Depends(get_current_session),
    auth_service: AuthService = Depends(get_auth_service),
):
    revoked = await auth_service.logout_all(
        session.user_id, correlation_id=get_request_id(request)
    )
    return LogoutAllResponse(message="All sessions revoked", revoked_sessions=revoked)


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Describe the current session",
)
async def current_session(session: SessionContext = Depends(get_current_session)):
    return SessionResponse(user_id=session.user_id, role=session.role, jti=session.jti)
