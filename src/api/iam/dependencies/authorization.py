"""Permission enforcement FastAPI dependencies.

Every enforcement point fails closed: a denial and a check that could not
be answered both end the request with 403. The authenticated subject id is
placed on `request.state.user_id` by the upstream identity layer.

Usage in FastAPI routes:
    @router.patch("/tenants/{tenant_id}")
    async def update_tenant(
        tenant_id: str,
        subject_id: Annotated[
            str,
            Depends(
                require_permission(
                    Permission.EDIT_SETTINGS, ResourceType.TENANT, "tenant_id"
                )
            ),
        ],
    ):
        ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from iam.application.observability import AccessProbe, DefaultAccessProbe
from iam.application.services.data_sync_service import DataSyncService
from iam.application.value_objects import RetryPolicy
from infrastructure.authorization_dependencies import get_authorization_client
from infrastructure.settings import AuthorizationSettings
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    PermissionDeniedError,
)
from shared_kernel.authorization.protocols import AuthorizationProvider
from shared_kernel.authorization.types import (
    SYSTEM_ENTITY_ID,
    Permission,
    ResourceType,
    format_resource,
)


def create_data_sync_service(
    authz: AuthorizationProvider,
    settings: AuthorizationSettings,
) -> DataSyncService:
    """Create the process-wide data sync service from settings."""
    return DataSyncService(
        authz=authz,
        retry_policy=RetryPolicy(
            max_retries=settings.retry_max_attempts,
            base_delay_seconds=settings.retry_base_delay_seconds,
        ),
    )


def get_data_sync_service(request: Request) -> DataSyncService:
    """FastAPI dependency returning the sync service built at startup.

    Raises:
        HTTPException 503: If the application started without one
    """
    service = getattr(request.app.state, "data_sync_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authorization service is not configured",
        )
    return service


def get_access_probe() -> AccessProbe:
    """Get AccessProbe instance."""
    return DefaultAccessProbe()


def get_current_subject_id(
    request: Request,
    probe: Annotated[AccessProbe, Depends(get_access_probe)],
) -> str:
    """Return the authenticated subject id.

    Raises:
        HTTPException 401: If no authenticated subject is on the request
    """
    subject_id = getattr(request.state, "user_id", None)
    if not subject_id:
        probe.subject_missing(path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return subject_id


async def check_permission_or_deny(
    authz: AuthorizationProvider,
    subject_id: str,
    permission: str,
    entity_type: str,
    entity_id: str,
) -> bool:
    """Check a permission inside a handler, treating failures as denial.

    Returns:
        True only if the backend answered and granted the permission
    """
    try:
        return await authz.check_permission(
            subject_id=subject_id,
            action=permission,
            entity_type=entity_type,
            entity_id=entity_id,
        )
    except AuthorizationError:
        return False


def require_permission(
    permission: Permission | str,
    entity_type: ResourceType | str,
    entity_id_param: str,
    allow_system_admin: bool = True,
) -> Callable[..., Awaitable[str]]:
    """Build a dependency enforcing a permission on the entity named in the path.

    Args:
        permission: Permission to require (e.g., Permission.MANAGE)
        entity_type: Type of the entity checked (e.g., ResourceType.TENANT)
        entity_id_param: Name of the path parameter holding the entity id
        allow_system_admin: Let system admins through without the entity check

    Returns:
        Dependency returning the authenticated subject id
    """

    async def dependency(
        request: Request,
        subject_id: Annotated[str, Depends(get_current_subject_id)],
        authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
        probe: Annotated[AccessProbe, Depends(get_access_probe)],
    ) -> str:
        entity_id = request.path_params.get(entity_id_param)
        if not entity_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Missing path parameter: {entity_id_param}",
            )

        await _enforce(
            authz=authz,
            probe=probe,
            subject_id=subject_id,
            permission=str(permission),
            entity_type=str(entity_type),
            entity_id=entity_id,
            allow_system_admin=allow_system_admin,
        )
        return subject_id

    return dependency


async def require_system_admin(
    subject_id: Annotated[str, Depends(get_current_subject_id)],
    authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
    probe: Annotated[AccessProbe, Depends(get_access_probe)],
) -> str:
    """Dependency allowing only platform administrators.

    Returns:
        The authenticated subject id
    """
    await _enforce(
        authz=authz,
        probe=probe,
        subject_id=subject_id,
        permission=Permission.MANAGE_ALL,
        entity_type=ResourceType.SYSTEM,
        entity_id=SYSTEM_ENTITY_ID,
        allow_system_admin=False,
    )
    return subject_id


async def _enforce(
    authz: AuthorizationClient,
    probe: AccessProbe,
    subject_id: str,
    permission: str,
    entity_type: str,
    entity_id: str,
    allow_system_admin: bool,
) -> None:
    resource = format_resource(entity_type, entity_id)
    try:
        if allow_system_admin and await authz.is_system_admin(subject_id):
            probe.access_granted(
                subject_id=subject_id,
                permission=permission,
                resource=resource,
                via_system_admin=True,
            )
            return

        await authz.assert_permission(
            subject_id=subject_id,
            action=permission,
            entity_type=entity_type,
            entity_id=entity_id,
        )
    except PermissionDeniedError:
        probe.access_denied(
            subject_id=subject_id, permission=permission, resource=resource
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    except AuthorizationError as e:
        probe.access_check_failed(
            subject_id=subject_id,
            permission=permission,
            resource=resource,
            error=e,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        ) from e

    probe.access_granted(
        subject_id=subject_id,
        permission=permission,
        resource=resource,
        via_system_admin=False,
    )
