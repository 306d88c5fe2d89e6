"""IAM domain module.

Contains the tenant, site and device vocabulary shared by the IAM layers.
"""

from iam.domain.value_objects import (
    DeviceStatus,
    MembershipStatus,
    SiteStatus,
    TenantRole,
    TenantStatus,
    UserType,
)

__all__ = [
    "DeviceStatus",
    "MembershipStatus",
    "SiteStatus",
    "TenantRole",
    "TenantStatus",
    "UserType",
]
