"""
Enums used across the access_token_core package.

Kept apart from the models so that schemas, repositories and services can
share them without circular imports.
"""

import enum


class AccessTokenState(enum.Enum):
    """Lifecycle states of an access token."""

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"


class AccessTokenFilter(enum.Enum):
    """Which tokens a listing should return."""

    ALL = "all"
    ACTIVE = "active"
    REVOKED = "revoked"
