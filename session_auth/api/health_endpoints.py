"""
Health Check Endpoints
---------------------
Health monitoring endpoint for the service and its dependencies.

Status:
- ok: database and session store both reachable
- degraded: database reachable, session store not (register and login still
  issue tokens; bearer authentication fails closed)
- down: database unreachable
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from loguru import logger
from sqlalchemy import text

from session_auth.auth.session_store import SessionStore
from session_auth.core.config_manager import settings
from session_auth.core.database_connection import db_manager
from session_auth.models.response_models import HealthStatus


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthStatus)
async def health_check(request: Request):
    """
    Check health of the service and its dependencies.

    Always answers 200; monitoring decides criticality from ``status``.

    Returns:
        HealthStatus: Overall status, uptime and per-dependency state
    """
    logger.debug("Health check requested")

    database_healthy = await _check_database()
    redis_healthy = await _check_session_store(request.app.state.session_store)

    if not database_healthy:
        status = "down"
    elif not redis_healthy:
        status = "degraded"
    else:
        status = "ok"

    if status != "ok":
        logger.warning(
            f"Health check detected issues: database={database_healthy}, redis={redis_healthy}"
        )

    started_at = getattr(request.app.state, "start_time", time.monotonic())
    return HealthStatus(
        status=status,
        uptime=int(time.monotonic() - started_at),
        database="connected" if database_healthy else "disconnected",
        redis="connected" if redis_healthy else "disconnected",
        version=settings.app_version,
        timestamp=datetime.now(timezone.utc),
    )


async def _check_database() -> bool:
    """
    Check PostgreSQL database connectivity.

    Returns:
        bool: True if database is accessible
    """
    try:
        async with db_manager.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def _check_session_store(session_store: SessionStore) -> bool:
    """Ping the session store. A successful ping ends a Redis outage."""
    try:
        return await session_store.is_available()
    except Exception as e:
        logger.error(f"Session store health check failed: {e}")
        return False
