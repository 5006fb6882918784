"""
Domain package for the Student Registry.

Exports the record models and the field validators used by the session,
service and store. Keep this package free of I/O.
"""

from student_registry.domain.models import Student, StudentDraft
from student_registry.domain.validation import (
    merge_update,
    parse_age,
    validate_age,
    validate_course,
    validate_draft,
    validate_email,
    validate_name,
)

__all__ = [
    "Student",
    "StudentDraft",
    "merge_update",
    "parse_age",
    "validate_age",
    "validate_course",
    "validate_draft",
    "validate_email",
    "validate_name",
]
