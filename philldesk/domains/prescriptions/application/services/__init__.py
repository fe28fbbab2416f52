# Application Services
from .file_validation import FileValidationResult, format_file_size, validate_file
from .status_notifications import PrescriptionNotificationObserver, detect_status_changes

__all__ = [
    "FileValidationResult",
    "PrescriptionNotificationObserver",
    "detect_status_changes",
    "format_file_size",
    "validate_file",
]
