"""
Field validation for student records.

Every function here is pure: it either returns the normalized value or raises
an `InvalidFormatError` / `OutOfRangeError`. The same validators run for
creation and for update; `merge_update` only skips them for fields the caller
left unchanged.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from student_registry.domain.models import Student, StudentDraft
from student_registry.errors import InvalidFormatError, OutOfRangeError

MIN_AGE = 16
MAX_AGE = 100
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_EMAIL_LENGTH = 100
MIN_COURSE_LENGTH = 2
MAX_COURSE_LENGTH = 100

NAME_PATTERN = re.compile(r"^[A-Za-z '\-]+$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")


def validate_name(value: str) -> str:
    name = value.strip()
    if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH or not NAME_PATTERN.match(name):
        raise InvalidFormatError(
            "Invalid name format. Name should contain only letters, spaces, hyphens, "
            f"and apostrophes ({MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters).",
            field="name",
        )
    return name


def validate_email(value: str) -> str:
    """
    Check the `local@domain.tld` shape and return the lowercase address.
    """
    email = value.strip()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(email):
        raise InvalidFormatError(
            "Invalid email format. Please enter a valid email address "
            "(e.g., user@example.com).",
            field="email",
        )
    return email.lower()


def validate_age(value: int) -> int:
    # bool is an int subclass; True must not pass as an age.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFormatError("Age must be a whole number.", field="age")
    if not MIN_AGE <= value <= MAX_AGE:
        raise OutOfRangeError(
            f"Age must be between {MIN_AGE} and {MAX_AGE} years.", field="age"
        )
    return value


def parse_age(text: str) -> int:
    """Parse raw user input into a validated age."""
    try:
        age = int(text.strip())
    except ValueError:
        raise InvalidFormatError("Please enter a valid number.", field="age") from None
    return validate_age(age)


def validate_course(value: str) -> str:
    course = value.strip()
    if not MIN_COURSE_LENGTH <= len(course) <= MAX_COURSE_LENGTH:
        raise InvalidFormatError(
            f"Course name must be between {MIN_COURSE_LENGTH} and "
            f"{MAX_COURSE_LENGTH} characters.",
            field="course",
        )
    return course


def validate_draft(name: str, email: str, age: int, course: str) -> StudentDraft:
    """
    Validate all four fields and build a draft ready for the store.

    Raises the first validation error encountered, in field order.
    """
    return StudentDraft(
        name=validate_name(name),
        email=validate_email(email),
        age=validate_age(age),
        course=validate_course(course),
    )


def _is_blank(value: Optional[Union[str, int]]) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def merge_update(
    current: Union[Student, StudentDraft],
    name: Optional[str] = None,
    email: Optional[str] = None,
    age: Optional[Union[int, str]] = None,
    course: Optional[str] = None,
) -> StudentDraft:
    """
    Build the replacement fields for an update.

    A missing or blank override keeps the current value as-is (it was
    validated when stored). A supplied override is validated exactly like a
    new record. `age` may be given as raw text, in which case it is parsed.
    """
    if _is_blank(age):
        new_age = current.age
    elif isinstance(age, str):
        new_age = parse_age(age)
    else:
        new_age = validate_age(age)

    return StudentDraft(
        name=current.name if _is_blank(name) else validate_name(name),
        email=current.email if _is_blank(email) else validate_email(email),
        age=new_age,
        course=current.course if _is_blank(course) else validate_course(course),
    )


__all__ = [
    "MIN_AGE",
    "MAX_AGE",
    "MIN_NAME_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_EMAIL_LENGTH",
    "MIN_COURSE_LENGTH",
    "MAX_COURSE_LENGTH",
    "validate_name",
    "validate_email",
    "validate_age",
    "parse_age",
    "validate_course",
    "validate_draft",
    "merge_update",
]
