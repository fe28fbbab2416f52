# Application Ports
from .upload_service_port import IPrescriptionUploadService, UploadProgressCallback

__all__ = ["IPrescriptionUploadService", "UploadProgressCallback"]
