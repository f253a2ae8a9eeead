"""
Configuration Module for the OAuth store

This module defines the configuration for the OAuth persistence layer, using
Pydantic for settings validation. Settings are loaded from environment
variables with defaults suitable for development environments.

Key configuration areas include:
- Database connection and pool sizing
- Error reporting
- Metrics collection
- Expiry sweep scheduling
- Bootstrap defaults for provisioned users
"""

import logging
from typing import List, Literal, Optional
from pydantic import (
    AliasChoices,
    Field,
    PostgresDsn,
    field_validator,
)
from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings for the OAuth store.

    Environment variables are automatically mapped to settings fields, with
    aliases provided for compatibility. For example, the database connection
    string can be set with either PG_DSN or DATABASE_URL.
    """

    debug: bool = False
    """
    Enable debug mode for verbose logging and SQL echo.
    Set with DEBUG=true environment variable.
    """

    pg_dsn: PostgresDsn = Field(
        "postgresql+asyncpg://postgres:password@db/oauth",
        validation_alias=AliasChoices("pg_dsn", "database_url"),
    )  # type: ignore
    """
    PostgreSQL connection string for database access.
    Set with PG_DSN or DATABASE_URL environment variables. Plain postgresql://
    and postgres:// URLs are rewritten to use the asyncpg driver.
    Default: postgresql+asyncpg://postgres:password@db/oauth
    """

    pg_pool_size: int = 5
    """Number of connections kept open in the pool."""

    pg_max_overflow: int = 10
    """Connections allowed above pg_pool_size under load."""

    pg_pool_timeout: float = 30.0
    """
    Seconds to wait for a pooled connection before failing with
    StorageUnavailable. This is the only timeout the store imposes.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: Literal["telegraf", "none"] = "none"
    """
    Metrics backend for the cleanup task: 'telegraf' or 'none'.
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    statsd_prefix: str = "oauthstore"
    """Prefix for all StatsD metrics from this service."""

    cleanup_interval: int = 3600
    """
    Seconds between expiry sweeps of codes and tokens.
    Set with CLEANUP_INTERVAL environment variable.
    Default: 3600 (1 hour)
    """

    default_user_scopes: List[str] = ["read", "write"]
    """Scopes granted to users provisioned through the bootstrap CLI."""

    bcrypt_rounds: int = 12
    """Work factor used when the bootstrap CLI hashes passwords."""

    @field_validator("pg_dsn", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v):
        """
        Point bare PostgreSQL URLs at the asyncpg driver.

        DATABASE_URL values shared with other tooling usually carry the plain
        postgresql:// or postgres:// scheme, which SQLAlchemy would resolve
        to a synchronous driver.
        """
        if isinstance(v, str):
            for prefix in ("postgres://", "postgresql://"):
                if v.startswith(prefix):
                    return "postgresql+asyncpg://" + v[len(prefix):]
        return v
