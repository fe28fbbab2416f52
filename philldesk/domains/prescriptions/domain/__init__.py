"""Prescription domain layer."""

from .entities import Prescription
from .events import PrescriptionStatusChanged
from .exceptions import (
    PrescriptionNotFoundError,
    PrescriptionServiceError,
    PrescriptionValidationError,
)
from .value_objects import PrescriptionStats, PrescriptionStatus, UploadState

__all__ = [
    "Prescription",
    "PrescriptionNotFoundError",
    "PrescriptionServiceError",
    "PrescriptionStats",
    "PrescriptionStatusChanged",
    "PrescriptionStatus",
    "PrescriptionValidationError",
    "UploadState",
]
