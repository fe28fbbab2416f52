# Prescription store
from .prescription_store import PrescriptionStore, error_message
from .state import PrescriptionState
from .state_container import StateContainer

__all__ = ["PrescriptionState", "PrescriptionStore", "StateContainer", "error_message"]
