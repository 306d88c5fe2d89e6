"""SQLAlchemy ORM model for the users table.

Users are created by the CRUD service when they first sign in through the
identity provider. `keycloak_id` is the identity-provider subject id that
authorization relationships are written for.
"""

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iam.domain.value_objects import UserType
from infrastructure.database.models import Base, TimestampMixin, pg_enum


class UserModel(Base, TimestampMixin):
    """ORM model for users table (read-only)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    keycloak_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_type: Mapped[UserType] = mapped_column(
        pg_enum(UserType, "user_type"), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserModel(id={self.id}, keycloak_id={self.keycloak_id})>"
