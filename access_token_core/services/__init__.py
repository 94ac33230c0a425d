"""Service layer for business logic."""

from .access_token_service import AccessTokenService

__all__ = [
    "AccessTokenService",
]
