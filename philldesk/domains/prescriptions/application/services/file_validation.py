# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Client-side checks run before a prescription upload.
# ============================================================================
"""Prescription file validation.

Size, MIME type and extension checks applied by the upload service before
any bytes are sent. The store never validates on its own.
"""

from dataclasses import dataclass

from philldesk.config.settings import Settings, get_settings

from ..dto import PrescriptionFile

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


@dataclass(frozen=True)
class FileValidationResult:
    """Outcome of validate_file()."""

    valid: bool
    error: str | None = None
    field: str | None = None

    @classmethod
    def ok(cls) -> "FileValidationResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, field: str, error: str) -> "FileValidationResult":
        return cls(valid=False, error=error, field=field)


def format_file_size(size_bytes: int) -> str:
    """Format a byte count for display ("0 Bytes", "1.5 KB", "10 MB").

    Args:
        size_bytes: Non-negative number of bytes.

    Returns:
        Size with at most two decimals and the largest fitting unit.
    """
    if size_bytes <= 0:
        return "0 Bytes"

    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    # Drop trailing zeros the same way float formatting would ("1.50" -> "1.5")
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def validate_file(file: PrescriptionFile, settings: Settings | None = None) -> FileValidationResult:
    """Check a prescription file against the upload limits.

    Checks run in order: size, MIME type, extension. The first failure wins.

    Args:
        file: File about to be uploaded.
        settings: Limits to apply (defaults to application settings).

    Returns:
        FileValidationResult with a user-facing error message when invalid.
    """
    settings = settings or get_settings()

    if file.file_size > settings.MAX_FILE_SIZE:
        return FileValidationResult.invalid(
            "file_size",
            f"File size must be less than {settings.MAX_FILE_SIZE / (1024 * 1024):g}MB",
        )

    if file.file_type not in settings.ALLOWED_FILE_TYPES:
        return FileValidationResult.invalid(
            "file_type",
            f"File type {file.file_type} is not allowed. "
            f"Please upload: {', '.join(settings.ALLOWED_FILE_TYPES)}",
        )

    extension = file.extension
    if extension not in settings.ALLOWED_EXTENSIONS:
        return FileValidationResult.invalid(
            "file_name",
            f"File extension {extension or '(none)'} is not allowed. "
            f"Please upload: {', '.join(settings.ALLOWED_EXTENSIONS)}",
        )

    return FileValidationResult.ok()
