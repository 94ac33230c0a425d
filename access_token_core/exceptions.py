"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the access token core,
with automatic logging and correlation ID tracking. Callers should branch on
the exception class or ``error_code``, never on message text.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from .constants import (
    ALREADY_REVOKED_MESSAGE,
    INVALID_TOKEN_MESSAGE,
    REVOKED_TOKEN_MESSAGE,
    SENSITIVE_FIELDS,
    TOKEN_NOT_FOUND_MESSAGE,
)

# Thread-local storage for correlation ID
_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    CONFLICT = "3002"

    # Business logic errors (4xxx)
    INVALID_TOKEN = "4005"
    REVOKED_TOKEN = "4006"


# Context keys kept for logs and debugging but left out of the public context
_INTERNAL_CONTEXT_KEYS = frozenset({"cause", "error_id", "correlation_id"})


def _describe_cause(cause: BaseException) -> Dict[str, Any]:
    return {
        "type": type(cause).__name__,
        "message": str(cause),
        "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
    }


class BaseError(Exception):
    """
    Root of the package's exception hierarchy.

    Each error carries an ErrorCode, an HTTP-style status code, a unique id,
    a timestamp and a context dict. It logs itself once when constructed:
    5xx as errors with the cause attached, 4xx as warnings.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())

        self.context: Dict[str, Any] = {
            key: value for key, value in context.items() if key not in SENSITIVE_FIELDS
        }
        self.context["error_id"] = self.error_id

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        if cause is not None:
            self.context["cause"] = _describe_cause(cause)

        self._log_error()

    @property
    def public_context(self) -> Dict[str, Any]:
        """Context safe to return to API callers."""
        return {k: v for k, v in self.context.items() if k not in _INTERNAL_CONTEXT_KEYS}

    def _log_error(self) -> None:
        # Lazy import: the logger module imports config which must not depend on us
        from .utils.logger import get_logger

        log_data: Dict[str, Any] = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "error_context": self.public_context,
        }
        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        summary = f"{type(self).__name__} [{self.error_code.value}]: {self.message}"
        logger = get_logger()
        if self.status_code >= 500:
            logger.error(summary, extra=log_data, exc_info=self.cause)
        elif self.status_code >= 400:
            logger.warning(summary, extra=log_data)
        else:
            logger.info(summary, extra=log_data)

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for API responses.

        Args:
            include_cause: Include cause type and message
            include_traceback: Also include the cause traceback (debug only)
        """
        error: Dict[str, Any] = {
            "id": self.error_id,
            "code": self.error_code.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "context": self.public_context,
        }

        if "correlation_id" in self.context:
            error["correlation_id"] = self.context["correlation_id"]

        cause = self.context.get("cause")
        if include_cause and cause:
            error["cause"] = {"type": cause["type"], "message": cause["message"]}
            if include_traceback:
                error["cause"]["traceback"] = cause["traceback"]

        return {"error": error}


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize repository error with database context."""
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


# ==================== ACCESS TOKEN EXCEPTIONS ====================


class InvalidFormatError(ValidationError):
    """Raised by the token codec when a display value cannot be decoded."""

    def __init__(self, message: str = "Malformed access token", **kwargs):
        super().__init__(message, error_code=ErrorCode.INVALID_FORMAT, **kwargs)


class InvalidAccessTokenError(BaseError):
    """
    Raised when a presented token is not authentic.

    Bad length, unknown salt id and hash mismatch all produce this same
    message with no extra context so callers cannot tell them apart.
    """

    def __init__(self):
        super().__init__(
            INVALID_TOKEN_MESSAGE,
            error_code=ErrorCode.INVALID_TOKEN,
            status_code=401,
        )


class RevokedAccessTokenError(BaseError):
    """Raised when an authentic token belongs to a revoked record."""

    def __init__(self, revoked_at: Optional[datetime], token_id: Optional[int] = None):
        revoked_at_text = revoked_at.isoformat() if revoked_at else "unknown"
        self.revoked_at = revoked_at
        super().__init__(
            REVOKED_TOKEN_MESSAGE.format(revoked_at=revoked_at_text),
            error_code=ErrorCode.REVOKED_TOKEN,
            status_code=401,
            revoked_at=revoked_at_text,
            token_id=token_id,
        )


class RecordNotFoundError(BaseError):
    """Raised when an operation addresses a token id that does not exist for the caller."""

    def __init__(self, token_id: Any, **context):
        self.token_id = token_id
        super().__init__(
            TOKEN_NOT_FOUND_MESSAGE.format(token_id=token_id),
            error_code=ErrorCode.NOT_FOUND,
            status_code=404,
            token_id=token_id,
            **context,
        )


class ConflictError(BaseError):
    """Raised when a state transition precondition is violated."""

    def __init__(self, message: str = ALREADY_REVOKED_MESSAGE, **context):
        super().__init__(message, error_code=ErrorCode.CONFLICT, status_code=409, **context)


class DuplicateSaltIdError(RepositoryError):
    """Raised by the repository when an insert collides on the salt id unique constraint."""

    def __init__(self, cause: Optional[Exception] = None, **context):
        super().__init__(
            "Duplicate AccessToken salt id",
            error_code=ErrorCode.DUPLICATE,
            status_code=409,
            cause=cause,
            **context,
        )


class TokenGenerationError(ServiceError):
    """Raised when no unique salt id could be generated within the attempt budget."""

    def __init__(self, attempts: int, cause: Optional[Exception] = None):
        super().__init__(
            f"Unable to generate a unique access token after {attempts} attempts",
            operation="create",
            cause=cause,
            attempts=attempts,
        )


# Factory functions for common error patterns
def validation_failed(
    field: str, value: Any, reason: str, cause: Optional[Exception] = None
) -> ValidationError:
    """
    Factory for validation errors.

    Args:
        field: Field that failed validation
        value: The invalid value
        reason: Why validation failed
        cause: Original exception if any

    Returns:
        Configured ValidationError instance
    """
    return ValidationError(
        f"Validation failed for {field}: {reason}",
        field=field,
        error_code=ErrorCode.VALIDATION_FAILED,
        cause=cause,
        value=str(value),
        reason=reason,
    )


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
