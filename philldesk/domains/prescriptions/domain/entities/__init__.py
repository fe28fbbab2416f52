# Domain Entities
from .prescription import Prescription

__all__ = ["Prescription"]
