# Application DTOs
from .upload_dtos import PrescriptionFile, PrescriptionPage, UploadMetadata, UploadResponse

__all__ = ["PrescriptionFile", "PrescriptionPage", "UploadMetadata", "UploadResponse"]
