"""Prescription statistics value object."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .prescription_status import PrescriptionStatus


class PrescriptionStats(BaseModel):
    """Per-status prescription counters as reported by the backend.

    Counters are never derived from the locally loaded list, which only holds
    one page of prescriptions.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    under_review: int = Field(default=0, ge=0)
    approved: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def drop_null_counters(cls, data: Any) -> Any:
        # Missing or null counters count as zero
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def count_for(self, status: PrescriptionStatus) -> int:
        """Return the counter matching a status."""
        return getattr(self, status.stats_key)

    def incremented(self, status: PrescriptionStatus) -> "PrescriptionStats":
        """Copy with ``total`` and the status bucket raised by one."""
        key = status.stats_key
        return self.model_copy(update={"total": self.total + 1, key: getattr(self, key) + 1})

    def decremented(self, status: PrescriptionStatus) -> "PrescriptionStats":
        """Copy with ``total`` and the status bucket lowered by one, floored at zero."""
        key = status.stats_key
        return self.model_copy(
            update={
                "total": max(0, self.total - 1),
                key: max(0, getattr(self, key) - 1),
            }
        )
