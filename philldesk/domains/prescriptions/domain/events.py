"""Prescription domain events."""

from dataclasses import dataclass

from philldesk.core.domain.events import DomainEvent

from .value_objects.prescription_status import PrescriptionStatus


@dataclass(frozen=True)
class PrescriptionStatusChanged(DomainEvent):
    """A loaded prescription has a different status than in the previous snapshot."""

    prescription_id: str = ""
    file_name: str = ""
    previous_status: PrescriptionStatus = PrescriptionStatus.PENDING
    new_status: PrescriptionStatus = PrescriptionStatus.PENDING

    @property
    def is_expected_transition(self) -> bool:
        """Does the change follow the review workflow?"""
        return self.previous_status.can_transition_to(self.new_status)

    def describe(self) -> str:
        return (
            f"Prescription {self.prescription_id} status changed from "
            f"{self.previous_status.value} to {self.new_status.value}"
        )
