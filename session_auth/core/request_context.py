"""
Request Context Middleware
--------------------------
Assigns a correlation id to every request and logs request start/completion.

The id is taken from an inbound ``X-Request-ID`` header when present,
otherwise generated. It is exposed on ``request.state.request_id``, bound to
every log record emitted while the request is handled, and echoed back in the
response header.
"""

import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def get_request_id(request: Request) -> str:
    """Return the correlation id of the current request ('-' outside the middleware)."""
    return getattr(request.state, "request_id", "-")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlation id and request logging middleware."""

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "")[:MAX_REQUEST_ID_LENGTH]
        if not request_id:
            request_id = str(uuid4())
        request.state.request_id = request_id

        with logger.contextualize(request_id=request_id):
            start_time = time.perf_counter()
            if self.log_requests:
                client_host = request.client.host if request.client else None
                logger.info(
                    f"Incoming request: {request.method} {request.url.path} "
                    f"(client={client_host}, user_agent={request.headers.get('user-agent')})"
                )

            response = await call_next(request)

            if self.log_requests:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.info(
                    f"Request completed: {request.method} {request.url.path} "
                    f"status={response.status_code} duration_ms={duration_ms:.2f}"
                )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
