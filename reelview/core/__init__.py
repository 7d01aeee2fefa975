"""Core infrastructure components."""
from .cache import InMemoryCache
from .circuit_breaker import CircuitBreaker, CircuitState
from .exceptions import (
    AppException,
    CircuitBreakerOpenError,
    LoadError,
    MediaApiFailure,
    NotFoundError,
    RemoteReadFailure,
    RemoteWriteFailure,
    UnauthenticatedError,
    ValidationError,
)
from .fetch_scope import FetchScope, FetchToken

__all__ = [
    "AppException",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "FetchScope",
    "FetchToken",
    "InMemoryCache",
    "LoadError",
    "MediaApiFailure",
    "NotFoundError",
    "RemoteReadFailure",
    "RemoteWriteFailure",
    "UnauthenticatedError",
    "ValidationError",
]
