"""
Lib package for TimeCraft.

Contains shared utilities:
- exceptions.py: Exception hierarchy
- errors.py: Error codes and the error response builder
- circuit_breaker.py: Circuit breaker for the schedule-generation model
- database.py: SQLAlchemy engine and session factory
- logging.py: structlog configuration
"""

from src.lib.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitState,
    clear_circuit_breakers,
    get_all_circuit_breakers,
    get_circuit_breaker,
)
from src.lib.errors import (
    AI_SERVICE_ERROR,
    INTERNAL_ERROR,
    NOT_FOUND,
    SERVICE_UNAVAILABLE,
    STORAGE_ERROR,
    VALIDATION_ERROR,
    build_error_response,
    classify_exception,
    get_error_message,
)
from src.lib.exceptions import (
    ConfigurationError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    SerializationError,
    ServiceError,
    TimeCraftException,
    ValidationError,
)

__all__ = [
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitState",
    "clear_circuit_breakers",
    "get_all_circuit_breakers",
    "get_circuit_breaker",
    # Errors
    "AI_SERVICE_ERROR",
    "INTERNAL_ERROR",
    "NOT_FOUND",
    "SERVICE_UNAVAILABLE",
    "STORAGE_ERROR",
    "VALIDATION_ERROR",
    "build_error_response",
    "classify_exception",
    "get_error_message",
    # Exceptions
    "ConfigurationError",
    "DatabaseError",
    "ExternalServiceError",
    "NotFoundError",
    "SerializationError",
    "ServiceError",
    "TimeCraftException",
    "ValidationError",
]
