"""
FastAPI Application Entry Point
-------------------------------
Main application initialization and configuration.
Composes the auth components, registers routers, middleware, exception
handlers and lifecycle handlers.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from session_auth.api import auth_endpoints, health_endpoints, user_endpoints
from session_auth.auth.auth_service import AuthService
from session_auth.auth.authenticator import RequestAuthenticator
from session_auth.auth.role_policy import RolePolicy
from session_auth.auth.session_store import MemorySessionStore, RedisSessionStore
from session_auth.auth.token_codec import TokenCodec
from session_auth.core.config_manager import ApplicationSettings, settings
from session_auth.core.database_connection import db_manager
from session_auth.core.error_handlers import register_exception_handlers
from session_auth.core import logger_setup  # noqa: F401 (configures loguru on import)
from session_auth.core.redis_connection import redis_manager
from session_auth.core.request_context import RequestContextMiddleware
from session_auth.psql_db_services.users_service import UsersService
from session_auth.utils.passwrd_hashing import PasswordHasher


def build_auth_components(app: FastAPI, config: ApplicationSettings) -> None:
    """Compose the auth core and attach it to ``app.state``."""
    if config.session_store_backend == "memory":
        logger.warning("Using in-memory session store; sessions are lost on restart")
        session_store = MemorySessionStore()
    else:
        session_store = RedisSessionStore(
            redis_manager,
            operation_timeout=config.session_store_operation_timeout_seconds,
            log_commands=config.log_session_store_commands,
        )

    token_codec = TokenCodec.from_settings(config)
    credential_store = UsersService(db_manager)

    app.state.session_store = session_store
    app.state.credential_store = credential_store
    app.state.auth_service = AuthService(
        credential_store=credential_store,
        password_hasher=PasswordHasher(rounds=config.password_bcrypt_rounds),
        token_codec=token_codec,
        session_store=session_store,
        role_policy=RolePolicy.from_settings(config),
    )
    app.state.authenticator = RequestAuthenticator(token_codec, session_store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager. Redis is connected lazily on first use."""

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Debug mode: {settings.debug}")
    app.state.start_time = time.monotonic()

    await db_manager.initialize()
    try:
        await UsersService(db_manager).ensure_schema()
        logger.info("[SUCCESS] PostgreSQL connected and ready")
    except Exception as e:
        logger.error(f"[FAILED] PostgreSQL: {e}")

    if settings.session_store_backend == "redis":
        redis_manager.initialize()

    build_auth_components(app, settings)
    logger.info("[SUCCESS] Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application")
    try:
        await db_manager.close()
        await redis_manager.close()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Session authentication service: JWT token pairs backed by a revocable allowlist",
    lifespan=lifespan,
    debug=settings.debug,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    swagger_ui_parameters={"displayRequestDuration": True},
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestContextMiddleware, log_requests=settings.log_requests)

register_exception_handlers(app)

# Register routers
app.include_router(health_endpoints.router)
app.include_router(auth_endpoints.router)
app.include_router(user_endpoints.router)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with basic information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/api/docs",
        "redoc": "/api/redoc",
        "openapi": "/api/openapi.json",
    }
