"""
Prescriptions domain.

Upload, list, statistics and status notifications for customer
prescriptions.
"""

from .application.dto import PrescriptionFile, PrescriptionPage, UploadMetadata, UploadResponse
from .application.ports import IPrescriptionUploadService, UploadProgressCallback
from .application.services import (
    FileValidationResult,
    PrescriptionNotificationObserver,
    detect_status_changes,
    format_file_size,
    validate_file,
)
from .application.store import PrescriptionState, PrescriptionStore
from .domain import (
    Prescription,
    PrescriptionNotFoundError,
    PrescriptionServiceError,
    PrescriptionStats,
    PrescriptionStatus,
    PrescriptionStatusChanged,
    PrescriptionValidationError,
    UploadState,
)

__all__ = [
    "FileValidationResult",
    "IPrescriptionUploadService",
    "Prescription",
    "PrescriptionFile",
    "PrescriptionNotFoundError",
    "PrescriptionNotificationObserver",
    "PrescriptionPage",
    "PrescriptionServiceError",
    "PrescriptionState",
    "PrescriptionStats",
    "PrescriptionStatus",
    "PrescriptionStatusChanged",
    "PrescriptionStore",
    "PrescriptionValidationError",
    "UploadMetadata",
    "UploadProgressCallback",
    "UploadResponse",
    "UploadState",
    "detect_status_changes",
    "format_file_size",
    "validate_file",
]
