"""Repository protocols (ports) for IAM bounded context.

The relational database is the source of truth for who belongs where.
The reconciliation job reads it through `IRelationalStateReader`; the
records below are the minimal facts it needs to rebuild every
relationship in the authorization service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from iam.domain.value_objects import TenantRole


@dataclass(frozen=True)
class SystemAdminRecord:
    """A user whose account type grants platform-wide administration."""

    user_id: str


@dataclass(frozen=True)
class TenantRecord:
    """An active tenant and its owner, if one could be determined.

    `owner_id` is the earliest active owner membership, else None.
    """

    id: str
    owner_id: str | None


@dataclass(frozen=True)
class MembershipRecord:
    """An active user-tenant association."""

    tenant_id: str
    user_id: str
    role: TenantRole


@dataclass(frozen=True)
class SiteRecord:
    id: str
    tenant_id: str
    manager_id: str | None = None


@dataclass(frozen=True)
class DeviceRecord:
    id: str
    site_id: str


@runtime_checkable
class IRelationalStateReader(Protocol):
    """Read-only view of the relational state relevant to authorization.

    All user identifiers are identity-provider subject ids, which are the
    subject ids permission checks are made with.

    Implementations raise `DatabaseReadError` when a listing cannot be read.
    """

    async def list_system_admins(self) -> list[SystemAdminRecord]:
        """List users of type system_admin."""
        ...

    async def list_active_tenants(self) -> list[TenantRecord]:
        """List active tenants with their resolved owners."""
        ...

    async def list_active_memberships(self) -> list[MembershipRecord]:
        """List active user-tenant associations."""
        ...

    async def list_active_sites(self) -> list[SiteRecord]:
        """List active sites."""
        ...

    async def list_active_devices(self) -> list[DeviceRecord]:
        """List active devices."""
        ...
