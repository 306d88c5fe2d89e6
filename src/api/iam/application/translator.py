"""Translation of relational events into authorization sync operations.

Each relational fact maps to the relationship tuples that encode it in the
authorization schema. The translator is pure: it performs no I/O and is
shared by the data sync service and the reconciliation job.
"""

from __future__ import annotations

from iam.application.value_objects import SyncAction, SyncOperation
from iam.domain.value_objects import TenantRole
from shared_kernel.authorization.types import (
    SYSTEM_ENTITY_ID,
    RelationshipTuple,
    RelationType,
    ResourceType,
)


class SyncOperationTranslator:
    """Builds the sync operation for each kind of relational event."""

    def tenant_created(self, tenant_id: str, owner_id: str | None) -> SyncOperation:
        """Link the tenant to the system entity and record its owner.

        Without an owner only the system link is written.
        """
        relationships = [
            RelationshipTuple.of(
                ResourceType.TENANT,
                tenant_id,
                RelationType.SYSTEM,
                ResourceType.SYSTEM,
                SYSTEM_ENTITY_ID,
            )
        ]
        if owner_id is not None:
            relationships.append(
                RelationshipTuple.of(
                    ResourceType.TENANT,
                    tenant_id,
                    RelationType.OWNER,
                    ResourceType.USER,
                    owner_id,
                )
            )
        context = {"tenant_id": tenant_id}
        if owner_id is not None:
            context["owner_id"] = owner_id
        return SyncOperation(
            name="sync_tenant_creation",
            action=SyncAction.WRITE,
            relationships=tuple(relationships),
            context=context,
        )

    def user_joined_tenant(
        self, tenant_id: str, user_id: str, role: TenantRole
    ) -> SyncOperation:
        return SyncOperation(
            name="sync_user_tenant_association",
            action=SyncAction.WRITE,
            relationships=(self._membership(tenant_id, user_id, role),),
            context={"tenant_id": tenant_id, "user_id": user_id, "role": role},
        )

    def user_left_tenant(
        self, tenant_id: str, user_id: str, role: TenantRole
    ) -> SyncOperation:
        return SyncOperation(
            name="sync_user_tenant_removal",
            action=SyncAction.DELETE,
            relationships=(self._membership(tenant_id, user_id, role),),
            context={"tenant_id": tenant_id, "user_id": user_id, "role": role},
        )

    def site_created(
        self, site_id: str, tenant_id: str, manager_id: str | None = None
    ) -> SyncOperation:
        relationships = [
            RelationshipTuple.of(
                ResourceType.SITE,
                site_id,
                RelationType.TENANT,
                ResourceType.TENANT,
                tenant_id,
            )
        ]
        context = {"site_id": site_id, "tenant_id": tenant_id}
        if manager_id is not None:
            relationships.append(
                RelationshipTuple.of(
                    ResourceType.SITE,
                    site_id,
                    RelationType.MANAGER,
                    ResourceType.USER,
                    manager_id,
                )
            )
            context["manager_id"] = manager_id
        return SyncOperation(
            name="sync_site_creation",
            action=SyncAction.WRITE,
            relationships=tuple(relationships),
            context=context,
        )

    def device_created(self, device_id: str, site_id: str) -> SyncOperation:
        return SyncOperation(
            name="sync_device_creation",
            action=SyncAction.WRITE,
            relationships=(
                RelationshipTuple.of(
                    ResourceType.DEVICE,
                    device_id,
                    RelationType.SITE,
                    ResourceType.SITE,
                    site_id,
                ),
            ),
            context={"device_id": device_id, "site_id": site_id},
        )

    def system_admin_granted(self, user_id: str) -> SyncOperation:
        return SyncOperation(
            name="sync_system_admin",
            action=SyncAction.WRITE,
            relationships=(
                RelationshipTuple.of(
                    ResourceType.SYSTEM,
                    SYSTEM_ENTITY_ID,
                    RelationType.ADMIN,
                    ResourceType.USER,
                    user_id,
                ),
            ),
            context={"user_id": user_id},
        )

    def _membership(
        self, tenant_id: str, user_id: str, role: TenantRole
    ) -> RelationshipTuple:
        return RelationshipTuple.of(
            ResourceType.TENANT,
            tenant_id,
            role.to_relation(),
            ResourceType.USER,
            user_id,
        )
