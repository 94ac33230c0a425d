"""Repository layer for data access."""

from .access_token_repository import AccessTokenRepository

__all__ = [
    "AccessTokenRepository",
]
