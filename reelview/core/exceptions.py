"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Invalid input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class UnauthenticatedError(AppException):
    """No identity for an action that requires one."""

    def __init__(self, action: str) -> None:
        super().__init__(
            message=f"Please sign in to {action}",
            status_code=401,
            error_code="UNAUTHENTICATED",
            details={"action": action},
        )


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class RemoteReadFailure(AppException):
    """The backend service failed to answer a read."""

    def __init__(
        self,
        collection: str,
        reason: str = "Unknown error",
        error_code: str = "REMOTE_READ_FAILURE",
    ) -> None:
        super().__init__(
            message=f"Failed to read {collection}: {reason}",
            status_code=502,
            error_code=error_code,
            details={"collection": collection, "reason": reason},
        )


class LoadError(RemoteReadFailure):
    """A feed page could not be loaded."""

    def __init__(self, collection: str, reason: str = "Unknown error") -> None:
        super().__init__(collection, reason, error_code="FEED_LOAD_ERROR")


class RemoteWriteFailure(AppException):
    """The backend service rejected a create/update/delete."""

    def __init__(self, collection: str, operation: str, reason: str = "Unknown error") -> None:
        super().__init__(
            message=f"Failed to {operation} {collection}: {reason}",
            status_code=502,
            error_code="REMOTE_WRITE_FAILURE",
            details={"collection": collection, "operation": operation, "reason": reason},
        )


class MediaApiFailure(AppException):
    """Host media API rejected a call (autoplay blocked, fullscreen denied)."""

    def __init__(self, operation: str, reason: str = "Unknown") -> None:
        super().__init__(
            message=f"Media {operation} failed: {reason}",
            status_code=500,
            error_code="MEDIA_API_FAILURE",
            details={"operation": operation, "reason": reason},
        )


class CircuitBreakerOpenError(AppException):
    """Circuit breaker is open - service calls blocked."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Circuit breaker open for: {service_name}",
            status_code=503,
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )
