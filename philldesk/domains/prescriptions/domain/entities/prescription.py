"""Prescription Entity.

A customer-submitted prescription document as returned by the PhillDesk API.
Instances are immutable; store actions replace records instead of mutating them.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..value_objects.prescription_status import PrescriptionStatus


class Prescription(BaseModel):
    """Prescription record with file metadata and review state."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str

    # File metadata
    file_name: str = ""
    file_url: str = ""
    file_size: int = Field(default=0, ge=0)
    file_type: str = ""
    google_drive_file_id: str | None = None

    status: PrescriptionStatus = PrescriptionStatus.PENDING

    # Timestamps
    uploaded_at: datetime | None = None
    updated_at: datetime | None = None

    # Notes
    patient_notes: str | None = None
    pharmacist_notes: str | None = None
    rejection_reason: str | None = None

    # Prescribing doctor
    doctor_name: str | None = None
    prescription_date: date | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        # Numeric ids from the backend are kept as strings
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> Any:
        # Older endpoints send upper-case statuses ("PENDING")
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def with_status(self, status: PrescriptionStatus, pharmacist_notes: str | None = None) -> "Prescription":
        """Copy with a new status and pharmacist notes."""
        return self.model_copy(update={"status": status, "pharmacist_notes": pharmacist_notes})

    def to_api(self) -> dict[str, Any]:
        """Serialize using the API's camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
