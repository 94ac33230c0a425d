"""Utility modules for the access token core."""

from .json_utils import dumps
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationIdFilter,
    configure_logging,
    get_logger,
)
from .token_codec import (
    decode_display_value,
    encode_display_value,
    generate_salt_id,
    generate_secret,
)
from .token_hasher import generate_salt, hash_secret, verify_secret

__all__ = [
    # JSON
    "dumps",
    # Logging utilities
    "AzureQueueHandler",
    "ContextAwareLogger",
    "CorrelationIdFilter",
    "configure_logging",
    "get_logger",
    # Token codec
    "decode_display_value",
    "encode_display_value",
    "generate_salt_id",
    "generate_secret",
    # Token hashing
    "generate_salt",
    "hash_secret",
    "verify_secret",
]
