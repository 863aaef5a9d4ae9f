"""
Tests for the custom exception hierarchy (src/lib/exceptions.py).

Verifies:
- All exceptions are subclasses of TimeCraftException
- ExternalServiceError is a ServiceError
- Exception messages and args are preserved
- Siblings do not catch each other
"""

from __future__ import annotations

import pytest

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

# All concrete exception classes (excluding the base)
EXCEPTION_CLASSES = [
    ConfigurationError,
    ServiceError,
    ExternalServiceError,
    DatabaseError,
    ValidationError,
    SerializationError,
    NotFoundError,
]


class TestExceptionHierarchy:
    """Test the exception class hierarchy."""

    def test_base_is_subclass_of_exception(self) -> None:
        assert issubclass(TimeCraftException, Exception)

    @pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
    def test_all_are_subclass_of_base(self, exc_class: type[TimeCraftException]) -> None:
        """Every custom exception must be a subclass of TimeCraftException."""
        assert issubclass(exc_class, TimeCraftException)

    def test_external_service_error_is_service_error(self) -> None:
        assert issubclass(ExternalServiceError, ServiceError)

    def test_validation_error_is_not_pydantics(self) -> None:
        """Our ValidationError is a domain error, unrelated to pydantic's."""
        import pydantic

        assert not issubclass(ValidationError, pydantic.ValidationError)


class TestExceptionMessages:
    """Test that exception messages are preserved correctly."""

    @pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
    def test_message_preserved(self, exc_class: type[TimeCraftException]) -> None:
        msg = f"Test error for {exc_class.__name__}"
        assert str(exc_class(msg)) == msg

    @pytest.mark.parametrize("exc_class", EXCEPTION_CLASSES)
    def test_empty_message(self, exc_class: type[TimeCraftException]) -> None:
        assert str(exc_class()) == ""

    def test_args_preserved(self) -> None:
        exc = NotFoundError("msg", 42)
        assert exc.args == ("msg", 42)


class TestExceptionCatching:
    """Test that exceptions can be caught at various hierarchy levels."""

    def test_catch_by_base_type(self) -> None:
        with pytest.raises(TimeCraftException):
            raise DatabaseError("connection failed")

    def test_catch_service_error_catches_external(self) -> None:
        with pytest.raises(ServiceError):
            raise ExternalServiceError("model down")

    def test_catch_specific_does_not_catch_sibling(self) -> None:
        """Catching NotFoundError should not catch ValidationError."""
        with pytest.raises(ValidationError):
            try:
                raise ValidationError("bad input")
            except NotFoundError:
                pytest.fail("NotFoundError handler caught ValidationError")


class TestExceptionDocstrings:
    """Test that all exceptions have docstrings."""

    @pytest.mark.parametrize("exc_class", [TimeCraftException, *EXCEPTION_CLASSES])
    def test_has_docstring(self, exc_class: type[TimeCraftException]) -> None:
        assert exc_class.__doc__ is not None
        assert len(exc_class.__doc__.strip()) > 0
