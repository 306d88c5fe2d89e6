"""SQLAlchemy ORM model for the user_tenant_associations table.

Each row grants a user one role in one tenant. Only active associations
are mirrored into the authorization service.
"""

from sqlalchemy import ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iam.domain.value_objects import MembershipStatus, TenantRole
from infrastructure.database.models import Base, TimestampMixin, pg_enum


class UserTenantAssociationModel(Base, TimestampMixin):
    """ORM model for user_tenant_associations table (read-only)."""

    __tablename__ = "user_tenant_associations"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("users.id"), nullable=False
    )
    tenant_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("tenants.id"), nullable=False
    )
    role: Mapped[TenantRole] = mapped_column(
        pg_enum(TenantRole, "role"), nullable=False
    )
    status: Mapped[MembershipStatus] = mapped_column(
        pg_enum(MembershipStatus, "user_tenant_status"), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<UserTenantAssociationModel(tenant_id={self.tenant_id}, "
            f"user_id={self.user_id}, role={self.role})>"
        )
