"""Database infrastructure - shared connection primitives."""

from infrastructure.database.engines import (
    build_async_url,
    create_read_engine,
    create_read_sessionmaker,
)
from infrastructure.database.exceptions import DatabaseError, DatabaseReadError

__all__ = [
    "DatabaseError",
    "DatabaseReadError",
    "build_async_url",
    "create_read_engine",
    "create_read_sessionmaker",
]
