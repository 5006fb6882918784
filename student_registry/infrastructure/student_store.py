"""
Record store for students: the only component that touches the database.

Every operation is a single parameterized statement on an autocommit
connection, so each call is one atomic unit against PostgreSQL. Integrity
(unique email, lowercase email, age range) is enforced by table constraints;
driver errors raised by those constraints are mapped to registry errors.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Generator, List, Optional

import psycopg
from psycopg import Connection, Cursor, sql
from psycopg.errors import CheckViolation, UniqueViolation
from psycopg.rows import DictRow, dict_row

from student_registry.domain.models import Student, StudentDraft
from student_registry.domain.validation import (
    MAX_AGE,
    MAX_COURSE_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MIN_AGE,
)
from student_registry.errors import (
    DuplicateKeyError,
    InvalidFormatError,
    NotFoundError,
    OutOfRangeError,
    StoreError,
)
from student_registry.utils.logging import get_logger

log = get_logger(__name__)

_COLUMNS = "id, name, email, age, course"

_TEMPLATES: Dict[str, str] = {
    "create_table": f"""
        CREATE TABLE IF NOT EXISTS {{table}} (
            id SERIAL PRIMARY KEY,
            name VARCHAR({MAX_NAME_LENGTH}) NOT NULL,
            email VARCHAR({MAX_EMAIL_LENGTH}) NOT NULL,
            age INTEGER NOT NULL,
            course VARCHAR({MAX_COURSE_LENGTH}) NOT NULL,
            CONSTRAINT {{email_key}} UNIQUE (email),
            CONSTRAINT {{email_lowercase}} CHECK (email = lower(email)),
            CONSTRAINT {{age_range}} CHECK (age BETWEEN {MIN_AGE} AND {MAX_AGE})
        )
    """,
    "insert": (
        "INSERT INTO {table} (name, email, age, course) "
        "VALUES (%(name)s, %(email)s, %(age)s, %(course)s) "
        f"RETURNING {_COLUMNS}"
    ),
    "select_all": f"SELECT {_COLUMNS} FROM {{table}} ORDER BY id",
    "select_by_id": f"SELECT {_COLUMNS} FROM {{table}} WHERE id = %(id)s",
    "search_by_name": (
        f"SELECT {_COLUMNS} FROM {{table}} "
        "WHERE name ILIKE %(pattern)s ESCAPE '\\' ORDER BY name, id"
    ),
    "update": (
        "UPDATE {table} SET name = %(name)s, email = %(email)s, "
        "age = %(age)s, course = %(course)s WHERE id = %(id)s "
        f"RETURNING {_COLUMNS}"
    ),
    "delete": "DELETE FROM {table} WHERE id = %(id)s",
    "count": "SELECT COUNT(*) AS total FROM {table}",
}


def _compile_statements(table: str) -> Dict[str, sql.Composed]:
    names = {
        "table": sql.Identifier(table),
        "email_key": sql.Identifier(f"{table}_email_key"),
        "email_lowercase": sql.Identifier(f"{table}_email_lowercase"),
        "age_range": sql.Identifier(f"{table}_age_range"),
    }
    return {key: sql.SQL(template).format(**names) for key, template in _TEMPLATES.items()}


def escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally."""
    return pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class StudentStore:
    """
    CRUD operations for the students table over a single psycopg connection.

    The connection is injected; the store never opens one itself. Use
    `student_registry.infrastructure.db_factory.open_store` to get a store
    bound to a live connection.
    """

    def __init__(self, connection: Connection, table: str = "students") -> None:
        self._conn = connection
        self.table = table
        self._statements = _compile_statements(table)

    @contextmanager
    def _cursor(self) -> Generator[Cursor[DictRow], None, None]:
        """Cursor yielding dict rows; driver errors become registry errors."""
        try:
            with self._conn.cursor(row_factory=dict_row) as cur:
                yield cur
        except UniqueViolation as exc:
            raise DuplicateKeyError(
                "Email already exists in database!", field="email"
            ) from exc
        except CheckViolation as exc:
            constraint = exc.diag.constraint_name or ""
            if constraint.endswith("_age_range"):
                raise OutOfRangeError(
                    f"Age must be between {MIN_AGE} and {MAX_AGE} years.", field="age"
                ) from exc
            raise InvalidFormatError(f"Rejected by constraint {constraint or 'check'}.") from exc
        except psycopg.Error as exc:
            log.warning(
                "Statement failed: %s",
                exc,
                exc_info=log.isEnabledFor(logging.DEBUG),
                extra={"table": self.table},
            )
            raise StoreError(f"Database error: {exc}") from exc

    def ensure_schema(self) -> None:
        """Create the table and its constraints if absent (idempotent)."""
        with self._cursor() as cur:
            cur.execute(self._statements["create_table"])
        log.info("Students table is ready", extra={"table": self.table})

    def create(self, draft: StudentDraft) -> Student:
        """
        Insert a new student and return it with its assigned id.

        Raises
        ------
        DuplicateKeyError
            If a student with the same email already exists.
        """
        with self._cursor() as cur:
            cur.execute(self._statements["insert"], _params(draft))
            row = cur.fetchone()
        student = Student.model_validate(row)
        log.info("Student created", extra={"student_id": student.id, "email": student.email})
        return student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with self._cursor() as cur:
            cur.execute(self._statements["select_by_id"], {"id": student_id})
            row = cur.fetchone()
        return Student.model_validate(row) if row is not None else None

    def get_all(self) -> List[Student]:
        with self._cursor() as cur:
            cur.execute(self._statements["select_all"])
            rows = cur.fetchall()
        return [Student.model_validate(row) for row in rows]

    def search_by_name(self, pattern: str) -> List[Student]:
        """Case-insensitive substring search on name, ordered by name."""
        with self._cursor() as cur:
            cur.execute(
                self._statements["search_by_name"],
                {"pattern": f"%{escape_like(pattern)}%"},
            )
            rows = cur.fetchall()
        return [Student.model_validate(row) for row in rows]

    def update(self, student_id: int, draft: StudentDraft) -> Student:
        """
        Replace every field except the id.

        Raises
        ------
        NotFoundError
            If no student has this id.
        DuplicateKeyError
            If the new email belongs to a different student.
        """
        params = _params(draft)
        params["id"] = student_id
        with self._cursor() as cur:
            cur.execute(self._statements["update"], params)
            row = cur.fetchone()
        if row is None:
            raise NotFoundError(student_id)
        student = Student.model_validate(row)
        log.info("Student updated", extra={"student_id": student.id, "email": student.email})
        return student

    def delete(self, student_id: int) -> bool:
        """Delete a student; returns False when the id does not exist."""
        with self._cursor() as cur:
            cur.execute(self._statements["delete"], {"id": student_id})
            deleted = cur.rowcount > 0
        if deleted:
            log.info("Student deleted", extra={"student_id": student_id})
        return deleted

    def count(self) -> int:
        with self._cursor() as cur:
            cur.execute(self._statements["count"])
            row = cur.fetchone()
        return int(row["total"]) if row is not None else 0

    @property
    def closed(self) -> bool:
        return bool(self._conn.closed)

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if not self._conn.closed:
            self._conn.close()
            log.info("Database connection closed")


def _params(draft: StudentDraft) -> Dict[str, object]:
    return {
        "name": draft.name,
        "email": draft.email,
        "age": draft.age,
        "course": draft.course,
    }


__all__ = ["StudentStore", "escape_like"]
