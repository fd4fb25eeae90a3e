"""Prescription upload validation and the mocked medication extractor."""

from __future__ import annotations

import dataclasses
import logging
import mimetypes
import random
from typing import List, Optional

from medicart.errors import ValidationError
from medicart.models.cart import CartItem
from medicart.services.cart import CartService

logger = logging.getLogger(__name__)

ACCEPTED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "application/pdf"}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

_CATALOGUE: tuple[dict[str, object], ...] = (
    {
        "name": "Amoxicillin",
        "dosage": "500mg",
        "frequency": "Take 3 times daily",
        "duration": "10 days",
        "price": "12.99",
    },
    {
        "name": "Ibuprofen",
        "dosage": "400mg",
        "frequency": "Take as needed for pain",
        "duration": "30 days",
        "price": "8.99",
    },
    {
        "name": "Lisinopril",
        "dosage": "10mg",
        "frequency": "Take once daily in the morning",
        "duration": "90 days",
        "price": "15.99",
    },
)


def validate_upload(filename: str, content_type: Optional[str], size_bytes: int) -> str:
    """Check type and size of an uploaded prescription and return its content type."""

    resolved = content_type or mimetypes.guess_type(filename)[0]
    if resolved not in ACCEPTED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Please upload a JPG, PNG, or PDF file.")
    if size_bytes > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large. Please upload a file smaller than 10MB.")
    return resolved


class PrescriptionExtractor:
    """Stand-in for prescription reading: returns 1 to 3 catalogue medications."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def extract(self, filename: str) -> List[CartItem]:
        count = self._rng.randint(1, len(_CATALOGUE))
        logger.debug("Extracted %s medication(s) from %s", count, filename)
        return [CartItem.model_validate(record) for record in _CATALOGUE[:count]]


@dataclasses.dataclass(frozen=True)
class UploadResult:
    filename: str
    extracted: List[CartItem]
    added: List[CartItem]


class PrescriptionUploader:
    """Validate an upload, extract its medications and add them to the cart."""

    def __init__(self, extractor: PrescriptionExtractor, cart: CartService) -> None:
        self._extractor = extractor
        self._cart = cart

    def upload(
        self,
        filename: str,
        *,
        content_type: Optional[str] = None,
        size_bytes: int,
    ) -> UploadResult:
        validate_upload(filename, content_type, size_bytes)
        extracted = self._extractor.extract(filename)
        added = self._cart.add_medications(extracted)
        logger.info(
            "Prescription %s yielded %s medication(s), %s new in cart",
            filename,
            len(extracted),
            len(added),
        )
        return UploadResult(filename=filename, extracted=extracted, added=added)


__all__ = [
    "ACCEPTED_CONTENT_TYPES",
    "MAX_UPLOAD_BYTES",
    "PrescriptionExtractor",
    "PrescriptionUploader",
    "UploadResult",
    "validate_upload",
]
