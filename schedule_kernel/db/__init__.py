"""Database layer - engine, base classes and session scope."""

from schedule_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from schedule_kernel.db.engine import (
    create_db_engine,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "create_db_engine",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
]
