from __future__ import annotations

import psycopg

from student_registry.domain.models import StudentDraft
from student_registry.errors import DuplicateKeyError, NotFoundError, StoreError
from student_registry.service import OperationResult, StudentService

ADA = StudentDraft(name="Ada Lovelace", email="ada@x.com", age=28, course="Math")
ALAN = StudentDraft(name="Alan Turing", email="alan@x.com", age=41, course="Computer Science")


def test_add_returns_student_with_id(service: StudentService) -> None:
    result = service.add(ADA)

    assert result.ok is True
    assert result.error is None
    assert result.error_kind is None
    assert result.student is not None
    assert result.student.id == 1


def test_add_duplicate_is_failed_result_not_exception(service: StudentService) -> None:
    service.add(ADA)

    result = service.add(ALAN.model_copy(update={"email": "ada@x.com"}))

    assert result.ok is False
    assert isinstance(result.error, DuplicateKeyError)
    assert result.error_kind == "DuplicateKey"
    assert result.message == "Email already exists in database!"


def test_find_missing_is_not_found(service: StudentService) -> None:
    result = service.find(3)

    assert result.ok is False
    assert isinstance(result.error, NotFoundError)
    assert result.message == "Student not found with ID: 3"


def test_list_and_search_populate_count(service: StudentService) -> None:
    service.add(ADA)
    service.add(ALAN)

    listed = service.list_all()
    searched = service.search("ada")

    assert listed.ok and listed.count == 2
    assert [s.name for s in listed.students] == ["Ada Lovelace", "Alan Turing"]
    assert searched.ok and searched.count == 1
    assert searched.students[0].email == "ada@x.com"


def test_update_missing_and_duplicate(service: StudentService) -> None:
    service.add(ADA)
    alan = service.add(ALAN).student

    missing = service.update(99, ADA)
    duplicate = service.update(alan.id, ALAN.model_copy(update={"email": "ada@x.com"}))

    assert missing.error_kind == "NotFound"
    assert duplicate.error_kind == "DuplicateKey"


def test_remove_reports_not_found_for_missing_id(service: StudentService) -> None:
    ada = service.add(ADA).student

    first = service.remove(ada.id)
    second = service.remove(ada.id)

    assert first.ok is True
    assert second.ok is False
    assert second.error_kind == "NotFound"
    assert service.find(ada.id).ok is False


def test_count(service: StudentService) -> None:
    assert service.count().count == 0
    service.add(ADA)
    assert service.count().count == 1


def test_store_failure_is_reported_not_raised(service: StudentService, fake_conn) -> None:
    fake_conn.fail_with = psycopg.OperationalError("connection lost")

    result = service.list_all()

    assert result.ok is False
    assert isinstance(result.error, StoreError)
    assert result.error_kind == "StoreError"
    assert result.students == []


def test_ada_lovelace_scenario(service: StudentService) -> None:
    from student_registry.domain.validation import validate_draft

    draft = validate_draft("Ada Lovelace", "Ada@X.com", 28, "Math")

    created = service.add(draft)
    assert created.ok and created.student.id == 1
    assert service.find(1).student.email == "ada@x.com"
    assert service.count().count == 1
    assert service.remove(1).ok is True
    assert service.count().count == 0
    assert service.find(1).error_kind == "NotFound"


def test_failure_factory() -> None:
    error = NotFoundError(5)

    result = OperationResult.failure(error)

    assert result == OperationResult(ok=False, error=error)
    assert result.student is None
    assert result.count is None
