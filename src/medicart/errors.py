"""Error types raised by Medicart domain operations."""

from __future__ import annotations


class MedicartError(Exception):
    """Base class for errors surfaced to callers."""


class ValidationError(MedicartError, ValueError):
    """User-supplied input is missing or malformed; nothing was persisted."""


__all__ = ["MedicartError", "ValidationError"]
