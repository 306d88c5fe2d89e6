"""SQLAlchemy ORM model for the tenants table.

Tenants are the top-level isolation boundary in the system.
"""

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iam.domain.value_objects import TenantStatus
from infrastructure.database.models import Base, TimestampMixin, pg_enum


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table (read-only)."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    status: Mapped[TenantStatus] = mapped_column(
        pg_enum(TenantStatus, "tenant_status"), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, slug={self.slug})>"
