"""
Custom exception hierarchy for TimeCraft.

Provides structured exception types for all subsystems:
- Configuration, persistence, external model calls
- Input validation and (de)serialization of generated schedules

All exceptions inherit from TimeCraftException, enabling
catch-all for TimeCraft-specific errors while keeping the
ability to catch specific error types.
"""

from __future__ import annotations


class TimeCraftException(Exception):
    """Base exception for all TimeCraft errors."""


class ConfigurationError(TimeCraftException):
    """Missing environment variables, invalid config values, or startup failures."""


class ServiceError(TimeCraftException):
    """Service failures (unexpected responses, unavailable collaborators)."""


class ExternalServiceError(ServiceError):
    """External API call failures (the schedule-generation model)."""


class DatabaseError(TimeCraftException):
    """Database connection, query, or commit failures."""


class ValidationError(TimeCraftException):
    """Input validation, parsing, or type conversion failures."""


class SerializationError(TimeCraftException):
    """JSON encode/decode, data serialization/deserialization failures."""


class NotFoundError(TimeCraftException):
    """A plan, task, or other addressed record does not exist."""
