"""
ERRORS MODULE
-------------
Every failure the points service can report.

Each error knows the HTTP status it maps to, so the API layer can translate
it into an {error, message} envelope without a lookup table.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class WellbeingError(Exception):
    """Base class for all domain errors."""

    STATUS_CODE = 500
    DEFAULT_RETRYABLE = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        self.error_code = self.__class__.__name__
        self.is_retryable = self.DEFAULT_RETRYABLE
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": self.message}

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"


class ValidationError(WellbeingError):
    """Malformed input. Not retried."""

    STATUS_CODE = 400


class InvalidAwardError(ValidationError):
    """Bad magnitude or category on a point award."""


class NotFoundError(WellbeingError):
    """Operation on an unknown user."""

    STATUS_CODE = 404


class StorageUnavailableError(WellbeingError):
    """The document store failed. Safe for the caller to retry."""

    STATUS_CODE = 500
    DEFAULT_RETRYABLE = True
