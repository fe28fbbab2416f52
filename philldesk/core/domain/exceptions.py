"""
Domain Exceptions

Base error types shared by every PhillDesk domain. Store actions read
``message`` from these when converting failures into state.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate failures to callers.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "VALIDATION_ERROR")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging or display."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Raised when input fails validation before reaching a backend."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class IntegrationException(DomainException):
    """Raised when an external integration fails."""

    def __init__(
        self,
        service: str,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ):
        self.service = service
        self.status_code = status_code
        self.original_error = original_error
        details: dict[str, Any] = {"service": service}
        if status_code is not None:
            details["status_code"] = status_code
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(message, code or "INTEGRATION_ERROR", details)
