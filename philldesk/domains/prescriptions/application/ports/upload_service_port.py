# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Upload service port used by the prescription store.
# ============================================================================
"""Prescription Upload Service Port.

Defines the interface the prescription store depends on. Every method is a
fallible remote call; failures raise an exception whose ``message`` (or
``str()``) is human readable.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ...domain.value_objects import PrescriptionStats
    from ..dto import PrescriptionFile, PrescriptionPage, UploadMetadata, UploadResponse

# Receives an integer percentage (0-100), expected to be non-decreasing
UploadProgressCallback = Callable[[int], None]


@runtime_checkable
class IPrescriptionUploadService(Protocol):
    """Interface for prescription file transfer and metadata persistence.

    Implementations: PrescriptionApiClient
    """

    async def upload_prescription(
        self,
        file: "PrescriptionFile",
        metadata: "UploadMetadata",
        on_progress: UploadProgressCallback | None = None,
    ) -> "UploadResponse | None":
        """Upload a prescription file and store its metadata.

        Args:
            file: File content and descriptors.
            metadata: Optional customer-supplied details.
            on_progress: Called zero or more times with 0-100.

        Returns:
            Backend acknowledgement, when the implementation has one.
        """
        ...

    async def get_prescriptions(
        self,
        page: int,
        page_size: int,
        status: str | None = None,
    ) -> "PrescriptionPage":
        """Get one page of the current user's prescriptions.

        Args:
            page: 1-based page number.
            page_size: Records per page.
            status: Optional status filter.

        Returns:
            PrescriptionPage whose ``data`` holds the records.
        """
        ...

    async def get_prescription_stats(self) -> "PrescriptionStats":
        """Get per-status counters for the current user."""
        ...

    async def delete_prescription(self, prescription_id: str) -> None:
        """Delete a prescription and its stored file.

        Args:
            prescription_id: Prescription identifier.
        """
        ...
