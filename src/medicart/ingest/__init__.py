"""Prescription ingestion helpers."""

from .prescriptions import (
    PrescriptionExtractor,
    PrescriptionUploader,
    UploadResult,
    validate_upload,
)

__all__ = [
    "PrescriptionExtractor",
    "PrescriptionUploader",
    "UploadResult",
    "validate_upload",
]
