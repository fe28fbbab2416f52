# Domain Value Objects
from .prescription_stats import PrescriptionStats
from .prescription_status import PrescriptionStatus
from .upload_state import UploadState

__all__ = ["PrescriptionStats", "PrescriptionStatus", "UploadState"]
