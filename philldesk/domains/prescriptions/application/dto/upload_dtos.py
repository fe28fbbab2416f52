# ============================================================================
# SCOPE: APPLICATION LAYER (Prescriptions)
# Description: Data Transfer Objects exchanged with the upload service.
# ============================================================================
"""Prescription upload DTOs.

Request and response objects for uploading prescription files and
listing prescriptions.
"""

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ...domain.entities import Prescription

# =============================================================================
# Request DTOs
# =============================================================================


@dataclass(frozen=True)
class PrescriptionFile:
    """File selected by the customer for upload."""

    content: bytes
    file_name: str
    file_type: str
    file_size: int = -1  # -1 = take len(content)

    def __post_init__(self) -> None:
        if self.file_size < 0:
            object.__setattr__(self, "file_size", len(self.content))

    @property
    def extension(self) -> str:
        """Lower-cased extension including the dot ("" when missing)."""
        return Path(self.file_name).suffix.lower()

    @classmethod
    def from_path(cls, path: str | Path, file_type: str) -> "PrescriptionFile":
        """Read a file from disk."""
        path = Path(path)
        content = path.read_bytes()
        return cls(content=content, file_name=path.name, file_type=file_type, file_size=len(content))


class UploadMetadata(BaseModel):
    """Optional details the customer attaches to an upload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    patient_notes: str | None = None
    doctor_name: str | None = None
    prescription_date: date | None = None

    def to_form_fields(self) -> dict[str, str]:
        """Non-empty fields keyed by their multipart form names."""
        fields: dict[str, str] = {}
        for name, value in self.model_dump(by_alias=True, mode="json").items():
            if value:
                fields[name] = str(value)
        return fields


# =============================================================================
# Response DTOs
# =============================================================================


class UploadResponse(BaseModel):
    """Backend acknowledgement of a stored prescription file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    success: bool = True
    prescription_id: str | None = None
    google_drive_file_id: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    uploaded_at: datetime | None = None
    message: str = ""

    @field_validator("prescription_id", mode="before")
    @classmethod
    def coerce_prescription_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class PrescriptionPage(BaseModel):
    """One page of the customer's prescriptions."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    data: list[Prescription] = []
    page: int = 1
    page_size: int | None = None
    total: int | None = None

    @model_validator(mode="before")
    @classmethod
    def wrap_bare_list(cls, value: Any) -> Any:
        # Some deployments return the list without an envelope
        if isinstance(value, list):
            return {"data": value}
        if isinstance(value, dict) and value.get("data") is None:
            return {**value, "data": []}
        return value
