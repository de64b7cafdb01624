"""
Configuration for the Vidly server.

Uses pydantic-settings for environment variable loading. Every setting
can be overridden with a VIDLY_-prefixed variable, e.g. VIDLY_DATABASE_PATH.

Invariants:
    - All settings have sensible defaults for local development
    - jwt_private_key has no default; startup fails without it
    - Secrets are never logged
"""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Server configuration loaded from environment."""

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=3000, description="Bind port")

    # Storage
    database_path: str = Field(default="vidly.db", description="SQLite database file")
    wal_mode: bool = Field(default=True, description="Enable SQLite WAL journal mode")
    busy_timeout_ms: int = Field(default=5000, description="SQLite busy timeout")
    cache_size_pages: int = Field(default=-64000, description="SQLite cache size (negative = KB)")
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Deadline for a single transaction before it is aborted",
    )

    # Auth
    jwt_private_key: str = Field(default="", description="HMAC key for signing tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_in: int = Field(default=0, description="Token lifetime in seconds (0=never expires)")
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
    )

    # Observability
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="'text' or 'json'")
    log_file: str | None = Field(default=None, description="Optional log file path")

    model_config = {"env_prefix": "VIDLY_"}

    def validate_for_startup(self) -> None:
        """Validate configuration consistency.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not self.jwt_private_key:
            raise ValueError("FATAL ERROR: VIDLY_JWT_PRIVATE_KEY is not defined.")
        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid VIDLY_LOG_FORMAT '{self.log_format}'. Must be one of: text, json")
        if self.request_timeout_seconds <= 0:
            raise ValueError("VIDLY_REQUEST_TIMEOUT_SECONDS must be positive")

    def log_config(self) -> None:
        """Log configuration (redacting secrets)."""
        logger.info(
            "Server configuration loaded",
            extra={
                "bind": f"{self.host}:{self.port}",
                "database_path": self.database_path,
                "wal_mode": self.wal_mode,
                "request_timeout_seconds": self.request_timeout_seconds,
                "jwt_algorithm": self.jwt_algorithm,
                "log_level": self.log_level,
            },
        )
