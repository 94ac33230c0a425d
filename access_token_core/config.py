"""
Centralized configuration management for the access token core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Security tuning for token hashing
- Validation using Pydantic
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import (
    DEFAULT_HASH_ITERATIONS,
    DEFAULT_MAX_SALT_ID_ATTEMPTS,
    MIN_HASH_ITERATIONS,
    EnvironmentVariable,
    LogLevel,
    QueueName,
)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./access_tokens.db"
        ),
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")


class QueueConfig(BaseModel):
    """Queue configuration for Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default=QueueName.LOGS.value, description="Logs queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling optional behavior."""

    enable_logs_queue: bool = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.ENABLE_LOGS_QUEUE.value, "false"
        ).lower()
        == "true",
        description="Ship structured logs to the Azure logs queue",
    )


class SecurityConfig(BaseModel):
    """Token hashing and generation settings."""

    hash_iterations: int = Field(
        default_factory=lambda: int(
            os.getenv(EnvironmentVariable.HASH_ITERATIONS.value, str(DEFAULT_HASH_ITERATIONS))
        ),
        description="PBKDF2 iterations used to derive the stored token hash",
    )
    max_salt_id_attempts: int = Field(
        default=DEFAULT_MAX_SALT_ID_ATTEMPTS,
        ge=1,
        description="How many salt ids to try before giving up on token creation",
    )

    @field_validator("hash_iterations")
    def validate_hash_iterations(cls, v: int) -> int:
        """Refuse iteration counts too low to slow down brute force."""
        if v < MIN_HASH_ITERATIONS:
            raise ValueError(f"hash_iterations must be at least {MIN_HASH_ITERATIONS}, got {v}")
        return v


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
