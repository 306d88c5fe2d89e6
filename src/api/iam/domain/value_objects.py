"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for roles and lifecycle states stored in the relational
database.
"""

from __future__ import annotations

from enum import StrEnum

from shared_kernel.authorization.types import RelationType


class TenantRole(StrEnum):
    """Roles a user can hold in a tenant.

    The authorization schema has no viewer relation; viewers are granted
    the member relation.
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"

    @classmethod
    def from_string(cls, value: str) -> TenantRole:
        """Parse a role name.

        Raises:
            ValueError: If value is not a known tenant role
        """
        try:
            return cls(value)
        except ValueError as e:
            raise ValueError(f"Invalid tenant role: {value!r}") from e

    def to_relation(self) -> RelationType:
        """Map the role onto its tenant relation in the authorization schema."""
        if self is TenantRole.VIEWER:
            return RelationType.MEMBER
        return RelationType(self.value)


class UserType(StrEnum):
    SYSTEM_ADMIN = "system_admin"
    REGULAR = "regular"
    SERVICE_ACCOUNT = "service_account"
    GUEST = "guest"


class TenantStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class MembershipStatus(StrEnum):
    ACTIVE = "active"
    INVITED = "invited"
    SUSPENDED = "suspended"


class SiteStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"


class DeviceStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"
