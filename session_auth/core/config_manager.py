"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.
"""

import secrets
from typing import List, Optional

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 32


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="Session Auth Service", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file_path: Optional[str] = Field(
        default=None, description="Optional rotating log file, e.g. logs/app_{time}.log"
    )
    log_requests: bool = Field(
        default=True, description="Log request start/complete lines"
    )

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8000, description="FastAPI port")

    # PostgreSQL database configuration
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="myuser", description="PostgreSQL user")
    database_password: str = Field(
        default="mypassword", description="PostgreSQL password"
    )
    database_name: str = Field(default="mydb", description="PostgreSQL database name")
    database_pool_size: int = Field(default=20, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )

    # Redis configuration
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_max_connections: int = Field(default=50, description="Redis max connections")
    redis_socket_timeout_seconds: float = Field(
        default=5.0, description="Redis connect/socket timeout"
    )
    redis_connect_retries: int = Field(
        default=1, ge=0, le=1, description="Extra connect attempts after a failure"
    )
    redis_reconnect_interval_seconds: float = Field(
        default=30.0,
        description="Minimum delay before an unavailable Redis is probed again",
    )

    # Session store configuration
    session_store_backend: str = Field(
        default="redis", description="Session store backend: redis or memory"
    )
    session_store_operation_timeout_seconds: float = Field(
        default=2.0,
        description="Upper bound for a single session store command or Redis connect attempt",
    )
    log_session_store_commands: bool = Field(
        default=False, description="Trace every session store command at DEBUG"
    )

    # JWT configuration
    jwt_access_secret: Optional[str] = Field(
        default=None, description="Signing secret for access tokens"
    )
    jwt_refresh_secret: Optional[str] = Field(
        default=None, description="Signing secret for refresh tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=15, gt=0, description="Access token lifetime in minutes"
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7, gt=0, description="Refresh token lifetime in days"
    )

    # Role seeding
    auth_default_role: str = Field(
        default="USER", description="Role assigned to newly registered users"
    )
    auth_admin_emails: str = Field(
        default="", description="Comma separated emails granted ADMIN at registration"
    )

    # Password hashing
    password_bcrypt_rounds: int = Field(
        default=10, ge=4, le=31, description="bcrypt cost factor"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("session_store_backend")
    @classmethod
    def validate_session_store_backend(cls, v: str) -> str:
        """Validate the session store backend name."""
        v_lower = v.lower()
        if v_lower not in ("redis", "memory"):
            raise ValueError("Session store backend must be 'redis' or 'memory'")
        return v_lower

    @field_validator("auth_default_role")
    @classmethod
    def validate_default_role(cls, v: str) -> str:
        """Validate the default role is a known role."""
        v_upper = v.upper()
        if v_upper not in ("ADMIN", "USER"):
            raise ValueError("Default role must be ADMIN or USER")
        return v_upper

    @model_validator(mode="after")
    def validate_jwt_secrets(self) -> "ApplicationSettings":
        """
        Make sure access and refresh tokens are signed with distinct, strong secrets.

        In debug mode missing secrets are generated per process (tokens do not
        survive a restart). Outside debug mode missing secrets abort startup.
        """
        for field_name in ("jwt_access_secret", "jwt_refresh_secret"):
            value = getattr(self, field_name)
            if not value:
                if not self.debug:
                    raise ValueError(
                        f"{field_name.upper()} must be set when DEBUG is false"
                    )
                logger.warning(
                    f"{field_name.upper()} not set - generated a random secret for this process"
                )
                setattr(self, field_name, secrets.token_urlsafe(48))
            elif len(value) < MIN_SECRET_LENGTH:
                raise ValueError(
                    f"{field_name.upper()} must be at least {MIN_SECRET_LENGTH} characters"
                )

        if self.jwt_access_secret == self.jwt_refresh_secret:
            raise ValueError("JWT access and refresh secrets must be different")
        return self

    @property
    def admin_email_list(self) -> List[str]:
        """Lower-cased emails from AUTH_ADMIN_EMAILS."""
        return [
            email.strip().lower()
            for email in self.auth_admin_emails.split(",")
            if email.strip()
        ]

    @property
    def access_token_ttl_seconds(self) -> int:
        """Access token lifetime in seconds."""
        return self.jwt_access_token_expire_minutes * 60

    @property
    def refresh_token_ttl_seconds(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.jwt_refresh_token_expire_days * 24 * 60 * 60

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


# Global settings instance
settings = ApplicationSettings()
