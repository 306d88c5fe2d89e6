"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for repositories without specifying
implementation details. This allows for dependency inversion and makes
the application layer independent of infrastructure.
"""

from iam.ports.repositories import (
    DeviceRecord,
    IRelationalStateReader,
    MembershipRecord,
    SiteRecord,
    SystemAdminRecord,
    TenantRecord,
)

__all__ = [
    "DeviceRecord",
    "IRelationalStateReader",
    "MembershipRecord",
    "SiteRecord",
    "SystemAdminRecord",
    "TenantRecord",
]
