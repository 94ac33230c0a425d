"""Pydantic schemas for the access token core."""

from .access_token_schema import AccessTokenCreate, AccessTokenRead, AccessTokenWithDisplayValue

__all__ = [
    "AccessTokenCreate",
    "AccessTokenRead",
    "AccessTokenWithDisplayValue",
]
