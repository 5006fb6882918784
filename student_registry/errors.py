"""
Error hierarchy for the Student Registry.

Validation and store errors are recoverable: the session re-prompts or the
service reports them as a failed result. ConnectionFailureError is the only
fatal condition and is raised before any operation runs.
"""

from __future__ import annotations

from typing import Optional


class StudentRegistryError(Exception):
    """Base class for all registry errors."""

    kind: str = "StudentRegistryError"

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(StudentRegistryError, ValueError):
    """A field value was rejected before reaching the store."""

    kind = "ValidationError"


class InvalidFormatError(ValidationError):
    kind = "InvalidFormat"


class OutOfRangeError(ValidationError):
    kind = "OutOfRange"


class StoreError(StudentRegistryError):
    """A statement against the store failed."""

    kind = "StoreError"


class DuplicateKeyError(StoreError):
    kind = "DuplicateKey"


class NotFoundError(StoreError):
    kind = "NotFound"

    def __init__(self, student_id: int) -> None:
        super().__init__(f"Student not found with ID: {student_id}", field="id")
        self.student_id = student_id


class ConnectionFailureError(StudentRegistryError):
    """The store could not be reached at startup."""

    kind = "ConnectionFailure"


__all__ = [
    "StudentRegistryError",
    "ValidationError",
    "InvalidFormatError",
    "OutOfRangeError",
    "StoreError",
    "DuplicateKeyError",
    "NotFoundError",
    "ConnectionFailureError",
]
