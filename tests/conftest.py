"""
Pytest configuration for the Student Registry.

Provides fixtures for:
- An in-memory fake psycopg connection for unit tests of the store, service,
  session and CLI
- Database connection management for integration tests
- Settings override for integration tests
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Generator, Iterable, List, Optional

import psycopg
import pytest
from psycopg import sql
from psycopg.errors import UniqueViolation

from student_registry.config import Settings
from student_registry.infrastructure.db_factory import build_dsn
from student_registry.infrastructure.student_store import StudentStore
from student_registry.service import StudentService


class FakeCursor:
    """Executes the store's statements against the fake connection's rows."""

    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._result: List[Dict[str, Any]] = []
        self.rowcount = -1

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False

    def execute(self, query: Any, params: Optional[Dict[str, Any]] = None) -> None:
        name = self._conn.statements[id(query)]
        self._conn.executed.append((name, params))
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        getattr(self, f"_{name}")(params or {})

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return dict(self._result[0]) if self._result else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._result]

    # statement handlers

    def _create_table(self, params: Dict[str, Any]) -> None:
        self._conn.schema_created += 1

    def _check_unique(self, email: str, own_id: Optional[int] = None) -> None:
        for row in self._conn.rows.values():
            if row["email"] == email and row["id"] != own_id:
                raise UniqueViolation(
                    'duplicate key value violates unique constraint "students_email_key"'
                )

    def _insert(self, params: Dict[str, Any]) -> None:
        self._check_unique(params["email"])
        row = {"id": self._conn.next_id, **params}
        self._conn.next_id += 1
        self._conn.rows[row["id"]] = row
        self._result = [row]
        self.rowcount = 1

    def _select_all(self, params: Dict[str, Any]) -> None:
        self._result = [self._conn.rows[key] for key in sorted(self._conn.rows)]

    def _select_by_id(self, params: Dict[str, Any]) -> None:
        row = self._conn.rows.get(params["id"])
        self._result = [row] if row is not None else []

    def _search_by_name(self, params: Dict[str, Any]) -> None:
        needle = re.sub(r"\\(.)", r"\1", params["pattern"][1:-1]).lower()
        matches = [row for row in self._conn.rows.values() if needle in row["name"].lower()]
        self._result = sorted(matches, key=lambda row: (row["name"], row["id"]))

    def _update(self, params: Dict[str, Any]) -> None:
        row = self._conn.rows.get(params["id"])
        if row is None:
            self._result = []
            self.rowcount = 0
            return
        self._check_unique(params["email"], own_id=row["id"])
        row.update({key: params[key] for key in ("name", "email", "age", "course")})
        self._result = [row]
        self.rowcount = 1

    def _delete(self, params: Dict[str, Any]) -> None:
        self.rowcount = 1 if self._conn.rows.pop(params["id"], None) is not None else 0

    def _count(self, params: Dict[str, Any]) -> None:
        self._result = [{"total": len(self._conn.rows)}]


class FakeConnection:
    """
    Minimal stand-in for a psycopg connection bound to one StudentStore.

    Statements are recognized by identity, so the fake must be bound to the
    store that issues them (see the `store` fixture).
    """

    def __init__(self) -> None:
        self.rows: Dict[int, Dict[str, Any]] = {}
        self.next_id = 1
        self.closed = False
        self.close_calls = 0
        self.schema_created = 0
        self.statements: Dict[int, str] = {}
        self.executed: List[tuple] = []
        self.fail_with: Optional[Exception] = None

    def bind(self, store: StudentStore) -> None:
        self.statements = {id(stmt): name for name, stmt in store._statements.items()}

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        del row_factory
        return FakeCursor(self)

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True

    def executed_names(self) -> List[str]:
        return [name for name, _ in self.executed]


def make_store(table: str = "students") -> StudentStore:
    conn = FakeConnection()
    store = StudentStore(conn, table=table)  # type: ignore[arg-type]
    conn.bind(store)
    return store


class ScriptedInput:
    """Replays answers for Session prompts; raises EOFError when exhausted."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)


@pytest.fixture
def store() -> StudentStore:
    """Store over an empty in-memory fake connection."""
    return make_store()


@pytest.fixture
def fake_conn(store: StudentStore) -> FakeConnection:
    return store._conn  # type: ignore[return-value]


@pytest.fixture
def service(store: StudentStore) -> StudentService:
    return StudentService(store)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "student_db"),
        db_table="students_test",
        db_connect_timeout=5,
        db_connect_attempts=1,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def pg_store(
    test_settings: Settings, test_dsn: str, db_connection_available: bool
) -> Generator[StudentStore, None, None]:
    """
    Store bound to a real PostgreSQL connection over an empty test table.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    store = StudentStore(conn, table=test_settings.db_table)
    store.ensure_schema()
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("TRUNCATE TABLE {} RESTART IDENTITY").format(
                sql.Identifier(test_settings.db_table)
            )
        )
    try:
        yield store
    finally:
        with conn.cursor() as cur:
            cur.execute(
                sql.SQL("DROP TABLE IF EXISTS {}").format(
                    sql.Identifier(test_settings.db_table)
                )
            )
        store.close()


@pytest.fixture
def store_factory():
    """Factory for additional fake-backed stores (e.g. with another table name)."""
    return make_store


@pytest.fixture
def scripted_input():
    """Factory building a ScriptedInput from a list of answers."""
    return ScriptedInput
