"""SQLAlchemy declarative base and shared model utilities.

The relational schema is owned by the CRUD service and its migrations; the
models built on this base are read-only mappings of the tables the
authorization layer reconciles from.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """Mixin mapping the created_at and updated_at columns.

    Membership ordering (earliest owner wins) relies on created_at.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )


def pg_enum(enum_class: type[StrEnum], name: str) -> ENUM:
    """Map a StrEnum onto an existing PostgreSQL enum type by value."""
    return ENUM(
        enum_class,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        create_type=False,
    )
