"""SQLAlchemy ORM model for the devices table."""

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iam.domain.value_objects import DeviceStatus
from infrastructure.database.models import Base, TimestampMixin, pg_enum


class DeviceModel(Base, TimestampMixin):
    """ORM model for devices table (read-only)."""

    __tablename__ = "devices"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    site_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("sites.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[DeviceStatus] = mapped_column(
        pg_enum(DeviceStatus, "device_status"), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<DeviceModel(id={self.id}, site_id={self.site_id})>"
