"""Personal access token issuing, validation and revocation."""

from .enums import AccessTokenFilter, AccessTokenState
from .exceptions import (
    BaseError,
    ConflictError,
    ErrorCode,
    InvalidAccessTokenError,
    RecordNotFoundError,
    RepositoryError,
    RevokedAccessTokenError,
    TokenGenerationError,
    ValidationError,
)
from .repositories import AccessTokenRepository
from .schemas import AccessTokenRead, AccessTokenWithDisplayValue
from .services import AccessTokenService

__all__ = [
    "AccessTokenFilter",
    "AccessTokenState",
    "AccessTokenRepository",
    "AccessTokenRead",
    "AccessTokenService",
    "AccessTokenWithDisplayValue",
    "BaseError",
    "ConflictError",
    "ErrorCode",
    "InvalidAccessTokenError",
    "RecordNotFoundError",
    "RepositoryError",
    "RevokedAccessTokenError",
    "TokenGenerationError",
    "ValidationError",
]
