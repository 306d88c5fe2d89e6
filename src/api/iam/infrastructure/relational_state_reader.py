"""PostgreSQL implementation of IRelationalStateReader.

Lists the relational facts the reconciliation job mirrors into the
authorization service. Every listing runs in its own short read session,
so a failure in one category does not poison the others.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from iam.domain.value_objects import (
    DeviceStatus,
    MembershipStatus,
    SiteStatus,
    TenantRole,
    TenantStatus,
    UserType,
)
from iam.infrastructure.models import (
    DeviceModel,
    SiteModel,
    TenantModel,
    UserModel,
    UserTenantAssociationModel,
)
from iam.infrastructure.observability import (
    DefaultRelationalStateReaderProbe,
    RelationalStateReaderProbe,
)
from iam.ports.repositories import (
    DeviceRecord,
    IRelationalStateReader,
    MembershipRecord,
    SiteRecord,
    SystemAdminRecord,
    TenantRecord,
)
from infrastructure.database.exceptions import DatabaseReadError

T = TypeVar("T")


class RelationalStateReader(IRelationalStateReader):
    """SQLAlchemy-backed reader over users, tenants, memberships, sites and devices.

    User ids are translated to identity-provider subject ids
    (`users.keycloak_id`) so the records can be written as relationship
    subjects directly.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        probe: RelationalStateReaderProbe | None = None,
    ) -> None:
        """Initialize reader with a read sessionmaker and probe.

        Args:
            session_factory: Sessionmaker bound to the read engine
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._probe = probe or DefaultRelationalStateReaderProbe()

    async def list_system_admins(self) -> list[SystemAdminRecord]:
        async def query(session: AsyncSession) -> list[SystemAdminRecord]:
            stmt = (
                select(UserModel.keycloak_id)
                .where(UserModel.user_type == UserType.SYSTEM_ADMIN)
                .order_by(UserModel.created_at)
            )
            result = await session.execute(stmt)
            return [SystemAdminRecord(user_id=row) for row in result.scalars()]

        return await self._read(UserModel.__tablename__, query)

    async def list_active_tenants(self) -> list[TenantRecord]:
        """List active tenants with their owners.

        The owner is the earliest active owner membership, else None. Other
        roles never stand in for an owner.
        """

        async def query(session: AsyncSession) -> list[TenantRecord]:
            tenants = await session.execute(
                select(TenantModel.id)
                .where(TenantModel.status == TenantStatus.ACTIVE)
                .order_by(TenantModel.created_at)
            )
            tenant_ids = list(tenants.scalars())

            memberships = await session.execute(
                select(
                    UserTenantAssociationModel.tenant_id,
                    UserTenantAssociationModel.role,
                    UserModel.keycloak_id,
                )
                .join(UserModel, UserModel.id == UserTenantAssociationModel.user_id)
                .where(UserTenantAssociationModel.status == MembershipStatus.ACTIVE)
                .order_by(UserTenantAssociationModel.created_at)
            )

            owners: dict[str, str] = {}
            for tenant_id, role, subject_id in memberships.all():
                if role == TenantRole.OWNER:
                    owners.setdefault(tenant_id, subject_id)

            return [
                TenantRecord(
                    id=tenant_id,
                    owner_id=owners.get(tenant_id),
                )
                for tenant_id in tenant_ids
            ]

        return await self._read(TenantModel.__tablename__, query)

    async def list_active_memberships(self) -> list[MembershipRecord]:
        async def query(session: AsyncSession) -> list[MembershipRecord]:
            stmt = (
                select(
                    UserTenantAssociationModel.tenant_id,
                    UserModel.keycloak_id,
                    UserTenantAssociationModel.role,
                )
                .join(UserModel, UserModel.id == UserTenantAssociationModel.user_id)
                .join(
                    TenantModel,
                    TenantModel.id == UserTenantAssociationModel.tenant_id,
                )
                .where(
                    UserTenantAssociationModel.status == MembershipStatus.ACTIVE,
                    TenantModel.status == TenantStatus.ACTIVE,
                )
                .order_by(UserTenantAssociationModel.created_at)
            )
            result = await session.execute(stmt)
            return [
                MembershipRecord(tenant_id=tenant_id, user_id=subject_id, role=role)
                for tenant_id, subject_id, role in result.all()
            ]

        return await self._read(UserTenantAssociationModel.__tablename__, query)

    async def list_active_sites(self) -> list[SiteRecord]:
        async def query(session: AsyncSession) -> list[SiteRecord]:
            stmt = (
                select(SiteModel.id, SiteModel.tenant_id)
                .where(SiteModel.status == SiteStatus.ACTIVE)
                .order_by(SiteModel.created_at)
            )
            result = await session.execute(stmt)
            return [
                SiteRecord(id=site_id, tenant_id=tenant_id)
                for site_id, tenant_id in result.all()
            ]

        return await self._read(SiteModel.__tablename__, query)

    async def list_active_devices(self) -> list[DeviceRecord]:
        async def query(session: AsyncSession) -> list[DeviceRecord]:
            stmt = (
                select(DeviceModel.id, DeviceModel.site_id)
                .where(DeviceModel.status == DeviceStatus.ACTIVE)
                .order_by(DeviceModel.created_at)
            )
            result = await session.execute(stmt)
            return [
                DeviceRecord(id=device_id, site_id=site_id)
                for device_id, site_id in result.all()
            ]

        return await self._read(DeviceModel.__tablename__, query)

    async def _read(
        self,
        table: str,
        query: Callable[[AsyncSession], Awaitable[list[T]]],
    ) -> list[T]:
        try:
            async with self._session_factory() as session:
                rows = await query(session)
        except SQLAlchemyError as e:
            self._probe.read_failed(table=table, error=e)
            raise DatabaseReadError(f"Failed to read {table}: {e}", table=table) from e

        self._probe.rows_listed(table=table, count=len(rows))
        return rows
