"""
Constants and enums for the access token core.

This module centralizes magic strings and sizing constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum

# Display value layout: salt id prefix followed by the raw secret
SALT_ID_LENGTH = 8
SECRET_LENGTH = 32
DISPLAY_VALUE_LENGTH = SALT_ID_LENGTH + SECRET_LENGTH

SALT_BYTES = 32
HASH_KEY_BYTES = 32
DEFAULT_HASH_ITERATIONS = 4096
MIN_HASH_ITERATIONS = 1000
DEFAULT_MAX_SALT_ID_ATTEMPTS = 5

DESCRIPTION_MAX_LENGTH = 1024

# Field names that hold token material and must never reach logs or error payloads
SENSITIVE_FIELDS = frozenset({"display_value", "secret", "salt_value", "value_hash"})

INVALID_TOKEN_MESSAGE = "Invalid Personal Access Token."
REVOKED_TOKEN_MESSAGE = "Invalid Personal Access Token. Access token was revoked at: {revoked_at}"
ALREADY_REVOKED_MESSAGE = "Access token has already been revoked!"
TOKEN_NOT_FOUND_MESSAGE = "Cannot locate access token with id {token_id}"


class QueueName(str, Enum):
    """Standard queue names used by the package."""

    LOGS = "logs-queue"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    HASH_ITERATIONS = "ACCESS_TOKEN_HASH_ITERATIONS"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
