"""
Database connection factory for the Student Registry.

The registry holds exactly one PostgreSQL connection for the lifetime of the
process. `open_store` is the supported way to acquire it: it connects
(retrying transient failures with tenacity), bootstraps the schema, and always
closes the connection on exit, including when the caller raises.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection
from psycopg.conninfo import conninfo_to_dict, make_conninfo
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from student_registry.config import Settings, get_settings
from student_registry.errors import ConnectionFailureError
from student_registry.infrastructure.student_store import StudentStore
from student_registry.utils.logging import get_logger

log = get_logger(__name__)

RETRY_WAIT = wait_exponential(multiplier=1, min=1, max=10)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a keyword/value conninfo string from settings, quoting each value."""
    settings = settings or get_settings()
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        dbname=settings.db_name,
    )


def _describe(conninfo: str) -> str:
    """host:port/dbname of a DSN, without credentials, for log output."""
    try:
        params = conninfo_to_dict(conninfo)
    except psycopg.Error:
        return "<invalid dsn>"
    return f"{params.get('host', '')}:{params.get('port', '')}/{params.get('dbname', '')}"


def connect(settings: Optional[Settings] = None, dsn: Optional[str] = None) -> Connection:
    """
    Open a dedicated autocommit connection with automatic retry.

    Retries up to `db_connect_attempts` times with exponential backoff on
    operational errors; each attempt is bounded by `db_connect_timeout`.

    Parameters
    ----------
    settings : Settings | None
        Connection settings. Defaults to the cached environment settings.
    dsn : str | None
        Full DSN override; takes precedence over the host/user/db settings.

    Returns
    -------
    Connection
        A new psycopg connection in autocommit mode.

    Raises
    ------
    ConnectionFailureError
        If the store is still unreachable after all attempts.
    """
    settings = settings or get_settings()
    conninfo = dsn or build_dsn(settings)

    retrying = Retrying(
        stop=stop_after_attempt(settings.db_connect_attempts),
        wait=RETRY_WAIT,
        retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
        reraise=False,
    )
    try:
        conn = retrying(
            psycopg.connect,
            conninfo,
            connect_timeout=settings.db_connect_timeout,
            autocommit=True,
        )
    except RetryError as exc:
        cause = exc.last_attempt.exception()
        log.error(
            "Database connection failed",
            extra={"target": _describe(conninfo), "attempts": settings.db_connect_attempts},
        )
        raise ConnectionFailureError(f"Database connection failed: {cause}") from cause
    except psycopg.Error as exc:
        log.error("Database connection failed", extra={"target": _describe(conninfo)})
        raise ConnectionFailureError(f"Database connection failed: {exc}") from exc

    log.info("Database connected", extra={"target": _describe(conninfo)})
    return conn


@contextmanager
def open_store(
    settings: Optional[Settings] = None,
    dsn: Optional[str] = None,
    bootstrap: bool = True,
) -> Generator[StudentStore, None, None]:
    """
    Context manager yielding a ready-to-use store.

    Example
    -------
        with open_store() as store:
            store.count()
    """
    settings = settings or get_settings()
    store = StudentStore(connect(settings, dsn=dsn), table=settings.db_table)
    try:
        if bootstrap:
            store.ensure_schema()
        yield store
    finally:
        store.close()


__all__ = [
    "build_dsn",
    "connect",
    "open_store",
]
