"""
Logger Setup
-----------
Centralized logging configuration using loguru.
Provides structured logging with request correlation ids and optional file rotation.
"""

import sys
from typing import Optional

from loguru import logger
from session_auth.core.config_manager import settings

DEFAULT_REQUEST_ID = "-"


def bind_request_id(correlation_id: Optional[str] = None):
    """
    Logger whose records carry ``correlation_id`` as their request id.

    Without an id the plain logger is returned, so an id set by the request
    context middleware (or the default) still applies.
    """
    if correlation_id:
        return logger.bind(request_id=correlation_id)
    return logger


def configure_logger() -> None:
    """
    Configure loguru logger with appropriate settings.
    Removes default handler and adds custom formatted handler.

    Every record carries ``extra["request_id"]``; it is filled in by the
    request context middleware through ``logger.contextualize``.
    """
    # Remove default handler
    logger.remove()
    logger.configure(extra={"request_id": DEFAULT_REQUEST_ID})

    # Add custom handler with formatting
    logger.add(
        sys.stdout,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>{extra[request_id]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=settings.log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    if settings.log_file_path:
        logger.add(
            settings.log_file_path,
            rotation="500 MB",
            retention="10 days",
            level=settings.log_level,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request_id]} | "
                "{name}:{function}:{line} | {message}"
            ),
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logger configured with level: {settings.log_level}")


# Configure logger on import
configure_logger()
