"""
Student Registry - console CRUD manager for student records on PostgreSQL.

The package is layered leaves-first:

- Field validation and immutable record models (`domain`)
- A record store issuing one parameterized statement per operation
  (`infrastructure`)
- A service turning store errors into failed operation results (`service`)
- An interactive menu session and a typer CLI (`session`, `main`)
"""

from __future__ import annotations

__version__ = "1.0.0"
__license__ = "MIT"

# Public API exports
from student_registry.config import Settings, get_settings
from student_registry.domain import (
    Student,
    StudentDraft,
    merge_update,
    parse_age,
    validate_age,
    validate_course,
    validate_draft,
    validate_email,
    validate_name,
)
from student_registry.errors import (
    ConnectionFailureError,
    DuplicateKeyError,
    InvalidFormatError,
    NotFoundError,
    OutOfRangeError,
    StoreError,
    StudentRegistryError,
    ValidationError,
)
from student_registry.infrastructure import StudentStore, build_dsn, connect, open_store
from student_registry.service import OperationResult, StudentService
from student_registry.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Student",
    "StudentDraft",
    "merge_update",
    "parse_age",
    "validate_age",
    "validate_course",
    "validate_draft",
    "validate_email",
    "validate_name",
    # Errors
    "StudentRegistryError",
    "ValidationError",
    "InvalidFormatError",
    "OutOfRangeError",
    "StoreError",
    "DuplicateKeyError",
    "NotFoundError",
    "ConnectionFailureError",
    # Store and service
    "StudentStore",
    "build_dsn",
    "connect",
    "open_store",
    "OperationResult",
    "StudentService",
    # Logging
    "configure_logging",
    "get_logger",
]
