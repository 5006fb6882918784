"""
Service layer between the presentation (session, CLI) and the record store.

Each operation runs exactly one store call and returns an `OperationResult`.
Registry errors raised during the call are logged and reported as a failed
result instead of propagating, so a single failing operation never takes the
session down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from student_registry.domain.models import Student, StudentDraft
from student_registry.errors import NotFoundError, StudentRegistryError
from student_registry.infrastructure.student_store import StudentStore
from student_registry.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of one registry operation.

    Only the fields relevant to the operation are populated; `error` is set
    exactly when `ok` is False.
    """

    ok: bool
    student: Optional[Student] = None
    students: List[Student] = field(default_factory=list)
    count: Optional[int] = None
    error: Optional[StudentRegistryError] = None

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error is not None else None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    @classmethod
    def failure(cls, error: StudentRegistryError) -> "OperationResult":
        return cls(ok=False, error=error)


class StudentService:
    def __init__(self, store: StudentStore) -> None:
        self.store = store

    def _run(
        self,
        operation: str,
        call: Callable[[], T],
        wrap: Callable[[T], OperationResult],
    ) -> OperationResult:
        try:
            value = call()
        except StudentRegistryError as exc:
            log.warning(
                f"[{operation.upper()} FAILED] {exc.message}",
                extra={"operation": operation, "error_kind": exc.kind},
            )
            return OperationResult.failure(exc)
        return wrap(value)

    def add(self, draft: StudentDraft) -> OperationResult:
        return self._run(
            "add",
            lambda: self.store.create(draft),
            lambda student: OperationResult(ok=True, student=student),
        )

    def find(self, student_id: int) -> OperationResult:
        """Look up one student; a missing id is a failed result with NotFoundError."""
        return self._run(
            "find",
            lambda: self.store.get_by_id(student_id),
            lambda student: OperationResult(ok=True, student=student)
            if student is not None
            else OperationResult.failure(NotFoundError(student_id)),
        )

    def list_all(self) -> OperationResult:
        return self._run(
            "list",
            self.store.get_all,
            lambda students: OperationResult(ok=True, students=students, count=len(students)),
        )

    def search(self, pattern: str) -> OperationResult:
        return self._run(
            "search",
            lambda: self.store.search_by_name(pattern),
            lambda students: OperationResult(ok=True, students=students, count=len(students)),
        )

    def update(self, student_id: int, draft: StudentDraft) -> OperationResult:
        return self._run(
            "update",
            lambda: self.store.update(student_id, draft),
            lambda student: OperationResult(ok=True, student=student),
        )

    def remove(self, student_id: int) -> OperationResult:
        return self._run(
            "delete",
            lambda: self.store.delete(student_id),
            lambda deleted: OperationResult(ok=True)
            if deleted
            else OperationResult.failure(NotFoundError(student_id)),
        )

    def count(self) -> OperationResult:
        return self._run(
            "count",
            self.store.count,
            lambda total: OperationResult(ok=True, count=total),
        )


__all__ = ["OperationResult", "StudentService"]
