"""
Service Exceptions
------------------
Error taxonomy surfaced by the auth core and the API layer.

Every error carries a stable ``kind`` and a human readable message. The
exception handlers in ``session_auth.core.error_handlers`` turn them into JSON
responses; nothing else about the failure (stack, secrets, which check failed)
reaches the client.
"""

from fastapi import status


class AuthServiceError(Exception):
    """Base class for errors with a client-facing shape."""

    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConflictError(AuthServiceError):
    """Raised when a unique resource (e.g. an email) already exists."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(AuthServiceError):
    """
    Bad credentials, bad signature, expired or revoked token.

    Deliberately one kind for all of them so a client cannot tell which
    check failed.
    """

    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class AccountNotFoundError(UnauthorizedError):
    """The user behind an otherwise valid token no longer exists.

    Surfaces as ``unauthorized`` so a stale token does not confirm whether the
    account ever existed.
    """


class ForbiddenError(AuthServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AuthServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
