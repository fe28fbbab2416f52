"""
HTTP clients for external PhillDesk services.
"""

from .prescription_api_client import PrescriptionApiClient, UploadProgressStream

__all__ = ["PrescriptionApiClient", "UploadProgressStream"]
