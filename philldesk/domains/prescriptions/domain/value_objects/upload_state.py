"""Upload State Value Object.

Transient progress of a single upload attempt. Never persisted.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UploadState:
    """Progress of the current prescription upload."""

    is_uploading: bool = False
    upload_progress: int = 0  # 0-100
    upload_error: str | None = None

    @classmethod
    def started(cls) -> "UploadState":
        """State at the beginning of a new attempt."""
        return cls(is_uploading=True, upload_progress=0, upload_error=None)

    @classmethod
    def failed(cls, message: str) -> "UploadState":
        """State after a failed attempt."""
        return cls(is_uploading=False, upload_progress=0, upload_error=message)
