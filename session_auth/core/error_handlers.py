"""
Exception Handlers
------------------
Turns service errors into a stable JSON error shape:

    {"statusCode": 401, "error": "unauthorized", "message": "...",
     "timestamp": "...", "path": "/auth/refresh", "requestId": "..."}

Client errors are logged at WARNING, unexpected errors at ERROR with the
stack trace. Stack traces are never part of the response body.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from session_auth.core.exceptions import AuthServiceError
from session_auth.core.request_context import get_request_id
from session_auth.models.response_models import ErrorResponse


def _error_response(
    request: Request, status_code: int, kind: str, message: str
) -> JSONResponse:
    body = ErrorResponse(
        status_code=status_code,
        error=kind,
        message=message,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
        request_id=get_request_id(request),
    )
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


async def handle_service_error(request: Request, exc: AuthServiceError) -> JSONResponse:
    logger.warning(
        f"Client error on {request.method} {request.url.path}: "
        f"{exc.kind} ({type(exc).__name__}) - {exc.message}"
    )
    return _error_response(request, exc.status_code, exc.kind, exc.message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Internal Server Error on {request.method} {request.url.path}: {type(exc).__name__}"
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the service error handlers on an application."""
    app.add_exception_handler(AuthServiceError, handle_service_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
