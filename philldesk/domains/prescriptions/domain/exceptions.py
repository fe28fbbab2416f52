"""Prescription domain exceptions."""

from typing import Any

from philldesk.core.domain.exceptions import IntegrationException, ValidationException

SERVICE_NAME = "prescriptions"


class PrescriptionServiceError(IntegrationException):
    """Failure reported by, or while talking to, the prescription backend.

    ``message`` is always human readable; store actions copy it into state.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(
            SERVICE_NAME,
            message,
            code=code,
            status_code=status_code,
            original_error=original_error,
        )


class PrescriptionNotFoundError(PrescriptionServiceError):
    """The backend has no prescription with the requested id."""

    def __init__(self, prescription_id: str, message: str | None = None):
        self.prescription_id = prescription_id
        super().__init__(
            message or f"Prescription {prescription_id} not found",
            status_code=404,
            code="NOT_FOUND",
        )


class PrescriptionValidationError(ValidationException):
    """A prescription file was rejected before upload."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, field=field, details=details)
