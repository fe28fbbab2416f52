"""Prescription Status Value Object.

Defines the lifecycle states of a customer prescription and the transitions
pharmacist review normally follows.
"""

from enum import Enum


class PrescriptionStatus(str, Enum):
    """Lifecycle of a prescription through pharmacist review."""

    PENDING = "pending"  # Uploaded, waiting for review
    UNDER_REVIEW = "under_review"  # Picked up by a pharmacist
    APPROVED = "approved"  # Accepted for dispensing
    REJECTED = "rejected"  # Refused, see rejection_reason
    COMPLETED = "completed"  # Dispensed and billed

    @property
    def display_name(self) -> str:
        """Human readable label."""
        names = {
            "pending": "Pending",
            "under_review": "Under Review",
            "approved": "Approved",
            "rejected": "Rejected",
            "completed": "Completed",
        }
        return names.get(self.value, self.value)

    @property
    def stats_key(self) -> str:
        """Name of the PrescriptionStats counter for this status."""
        keys = {
            "pending": "pending",
            "under_review": "under_review",
            "approved": "approved",
            "rejected": "rejected",
            "completed": "completed",
        }
        return keys.get(self.value, "pending")

    def can_transition_to(self, new_status: "PrescriptionStatus") -> bool:
        """Check whether a transition follows the review workflow.

        State machine:
        - pending -> under_review
        - under_review -> approved, rejected
        - approved -> completed
        - rejected -> completed
        - completed -> (final state)

        The backend is the system of record; this is informational only.
        """
        transitions: dict[str, list[str]] = {
            "pending": ["under_review"],
            "under_review": ["approved", "rejected"],
            "approved": ["completed"],
            "rejected": ["completed"],
            "completed": [],
        }
        return new_status.value in transitions.get(self.value, [])

    def is_final(self) -> bool:
        """Is this a final state?"""
        return self.value == "completed"

    def is_awaiting_pharmacist(self) -> bool:
        """Does the prescription still need pharmacist action?"""
        return self.value in ["pending", "under_review"]
