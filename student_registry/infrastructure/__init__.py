"""
Infrastructure package for the Student Registry.

Centralizes database concerns: the connection factory and the record store.
Keep this layer focused on I/O and resource management, decoupled from the
session and CLI.
"""

from student_registry.infrastructure.db_factory import build_dsn, connect, open_store
from student_registry.infrastructure.student_store import StudentStore

__all__ = [
    "StudentStore",
    "build_dsn",
    "connect",
    "open_store",
]
