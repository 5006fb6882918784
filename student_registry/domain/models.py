"""
Domain models for the Student Registry.

`StudentDraft` is a record that has not been persisted yet (no id); `Student`
is a row of the `students` table. Both are immutable. Field rules are enforced
by `student_registry.domain.validation`, not by these models.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class StudentDraft(BaseModel):
    """
    A validated student that has not been assigned an id yet.
    """

    name: str = Field(..., description="Full name, letters/spaces/hyphens/apostrophes.")
    email: str = Field(..., description="Lowercase email address, unique across the table.")
    age: int = Field(..., description="Age in years, 16 to 100 inclusive.")
    course: str = Field(..., description="Course name.")

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


class Student(StudentDraft):
    """
    Representation of a single row in the `students` table.
    """

    id: int = Field(..., description="Primary key assigned by the store.")

    def to_draft(self) -> StudentDraft:
        return StudentDraft(name=self.name, email=self.email, age=self.age, course=self.course)


__all__ = ["Student", "StudentDraft"]
