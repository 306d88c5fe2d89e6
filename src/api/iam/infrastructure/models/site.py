"""SQLAlchemy ORM model for the sites table."""

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iam.domain.value_objects import SiteStatus
from infrastructure.database.models import Base, TimestampMixin, pg_enum


class SiteModel(Base, TimestampMixin):
    """ORM model for sites table (read-only).

    The table records no site manager; manager relationships are only
    written when a site is created with one.
    """

    __tablename__ = "sites"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenants.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[SiteStatus] = mapped_column(
        pg_enum(SiteStatus, "site_status"), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<SiteModel(id={self.id}, tenant_id={self.tenant_id})>"
