"""
Centralized error types for the InfraSim backend.

Provides consistent error handling across the simulation core and API with:
- Type-safe error classes
- HTTP status code mapping
- Structured error responses
"""

from enum import Enum
from typing import Optional, Dict, Any
from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    """Application error codes for consistent error identification."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Not found errors (404)
    NOT_FOUND = "NOT_FOUND"
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    RUN_NOT_FOUND = "RUN_NOT_FOUND"

    # Conflict errors (409)
    RUN_ALREADY_EXISTS = "RUN_ALREADY_EXISTS"
    RUN_TERMINATED = "RUN_TERMINATED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BROADCAST_ERROR = "BROADCAST_ERROR"


class InfraSimError(Exception):
    """Base exception class for InfraSim application errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "code": self.code.value,
                "message": self.message,
                **self.details,
            }
        )


# =============================================================================
# Specific Error Classes
# =============================================================================

class ValidationError(InfraSimError):
    """Raised when an asset snapshot or simulation config is malformed."""

    def __init__(
        self,
        message: str = "Validation failed",
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class NotFoundError(InfraSimError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        code: ErrorCode = ErrorCode.NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class AssetNotFoundError(NotFoundError):
    """Raised when the asset provider has no record for an asset id."""

    def __init__(self, asset_id: str):
        super().__init__(
            message=f"Asset not found: {asset_id}",
            code=ErrorCode.ASSET_NOT_FOUND,
            details={"asset_id": asset_id},
        )


class RunNotFoundError(NotFoundError):
    """Raised when a run id is not held by the registry."""

    def __init__(self, run_id: str):
        super().__init__(
            message=f"Simulation run not found: {run_id}",
            code=ErrorCode.RUN_NOT_FOUND,
            details={"run_id": run_id},
        )


class RunStateError(InfraSimError):
    """Raised on an illegal lifecycle transition or a duplicate run id."""

    def __init__(
        self,
        message: str = "Invalid run state transition",
        code: ErrorCode = ErrorCode.RUN_TERMINATED,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class BroadcastError(InfraSimError):
    """Raised by a subscriber that cannot accept an event."""

    def __init__(
        self,
        message: str = "Event delivery failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=ErrorCode.BROADCAST_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


# =============================================================================
# Error Handler Helpers
# =============================================================================

def handle_exception(exc: Exception, default_message: str = "An unexpected error occurred") -> HTTPException:
    """
    Convert any exception to an appropriate HTTPException.

    Args:
        exc: The exception to handle
        default_message: Message to use for unknown exceptions

    Returns:
        HTTPException with appropriate status code and detail
    """
    if isinstance(exc, InfraSimError):
        return exc.to_http_exception()

    if isinstance(exc, HTTPException):
        return exc

    import logging
    logging.getLogger("infrasim-backend").error(f"Unexpected error: {exc}", exc_info=True)

    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "code": ErrorCode.INTERNAL_ERROR.value,
            "message": default_message,
        }
    )


def raise_validation_error(
    field: str,
    message: str,
    value: Optional[Any] = None,
) -> None:
    """Helper to raise a validation error with field context."""
    details = {"field": field}
    if value is not None:
        details["value"] = str(value)[:100]
    raise ValidationError(
        message=f"Invalid {field}: {message}",
        code=ErrorCode.INVALID_INPUT,
        details=details,
    )
