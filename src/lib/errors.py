"""
Centralized Error Response Builder for TimeCraft.

Provides consistent error codes and messages for use across the API
and service layers.

Error codes are constants that map to default message strings.
The builder returns structured error dicts compatible with the API
response envelope (see src.api.schemas.error_response).
"""

from __future__ import annotations

from typing import Any

from src.lib.exceptions import (
    ConfigurationError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    SerializationError,
    TimeCraftException,
    ValidationError,
)

# =============================================================================
# Error Code Constants
# =============================================================================

NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"
AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
STORAGE_ERROR = "STORAGE_ERROR"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

# =============================================================================
# Message Registry
#
# Maps error_code -> default message string.
# =============================================================================

_ERROR_MESSAGES: dict[str, str] = {
    NOT_FOUND: "The requested resource was not found.",
    VALIDATION_ERROR: "Invalid input. Please check your request.",
    INTERNAL_ERROR: "An internal error occurred. Please try again.",
    AI_SERVICE_ERROR: "Failed to communicate with the AI model.",
    STORAGE_ERROR: "Failed to read or write saved plans.",
    SERVICE_UNAVAILABLE: "Schedule generation is not configured on this server.",
}

# (exception type, error code, HTTP status), most specific first
_EXCEPTION_MAP: list[tuple[type[TimeCraftException], str, int]] = [
    (NotFoundError, NOT_FOUND, 404),
    (ValidationError, VALIDATION_ERROR, 400),
    (SerializationError, AI_SERVICE_ERROR, 502),
    (ExternalServiceError, AI_SERVICE_ERROR, 502),
    (DatabaseError, STORAGE_ERROR, 500),
    (ConfigurationError, SERVICE_UNAVAILABLE, 503),
]


# =============================================================================
# Error Response Builder
# =============================================================================


def get_error_message(code: str) -> str:
    """
    Get the default message for a given error code.

    Falls back to a generic message if the error code is unknown.

    Args:
        code: Error code constant (e.g. NOT_FOUND, VALIDATION_ERROR)

    Returns:
        Message string
    """
    return _ERROR_MESSAGES.get(code, "An error occurred.")


def build_error_response(
    code: str,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a structured error response dict.

    The returned dict is compatible with the API envelope error field:
    { "code": "...", "message": "..." }

    Args:
        code: Error code constant (e.g. NOT_FOUND)
        message: Optional override message (bypasses the registry lookup)
        details: Optional additional error details

    Returns:
        Structured error dict: {"code": str, "message": str, "details": dict | None}
    """
    resolved_message = message if message is not None else get_error_message(code)
    error: dict[str, Any] = {
        "code": code,
        "message": resolved_message,
    }
    if details is not None:
        error["details"] = details
    return error


def classify_exception(exc: TimeCraftException) -> tuple[str, int]:
    """Map a domain exception to an (error code, HTTP status) pair."""
    for exc_type, code, status in _EXCEPTION_MAP:
        if isinstance(exc, exc_type):
            return code, status
    return INTERNAL_ERROR, 500


__all__ = [
    # Error code constants
    "NOT_FOUND",
    "VALIDATION_ERROR",
    "INTERNAL_ERROR",
    "AI_SERVICE_ERROR",
    "STORAGE_ERROR",
    "SERVICE_UNAVAILABLE",
    # Functions
    "get_error_message",
    "build_error_response",
    "classify_exception",
]
