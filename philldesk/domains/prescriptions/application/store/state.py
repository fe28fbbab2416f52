"""Prescription store state snapshot."""

from dataclasses import dataclass, field

from ...domain.entities import Prescription
from ...domain.value_objects import PrescriptionStats, UploadState


@dataclass(frozen=True)
class PrescriptionState:
    """Immutable snapshot held by PrescriptionStore.

    ``prescriptions`` holds the most recently fetched page, newest first.
    ``error`` is the global error channel shared by every action.
    """

    prescriptions: tuple[Prescription, ...] = ()
    loading: bool = False
    error: str | None = None
    upload_state: UploadState = field(default_factory=UploadState)
    stats: PrescriptionStats = field(default_factory=PrescriptionStats)

    def find(self, prescription_id: str) -> Prescription | None:
        """Return the loaded prescription with this id, if any."""
        for prescription in self.prescriptions:
            if prescription.id == prescription_id:
                return prescription
        return None
