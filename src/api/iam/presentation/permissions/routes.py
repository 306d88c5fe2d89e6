"""HTTP routes exposing permission status to the UI."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from iam.dependencies.authorization import (
    get_current_subject_id,
    require_system_admin,
)
from iam.presentation.permissions.models import (
    CacheStatsResponse,
    PermissionStatusResponse,
)
from infrastructure.authorization_dependencies import get_authorization_client
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.exceptions import AuthorizationError
from shared_kernel.authorization.types import (
    Permission,
    PermissionCheck,
    ResourceType,
)

router = APIRouter(
    prefix="/permissions",
    tags=["permissions"],
)


@router.get("")
async def get_permissions(
    entity_type: Annotated[ResourceType, Query(description="Entity type")],
    entity_id: Annotated[str, Query(min_length=1, description="Entity id")],
    permission: Annotated[
        list[Permission],
        Query(min_length=1, description="Permissions to check (repeatable)"),
    ],
    subject_id: Annotated[str, Depends(get_current_subject_id)],
    authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
) -> PermissionStatusResponse:
    """Report which of the requested permissions the caller holds.

    Used by the UI to show or hide actions. It never enforces anything, so
    failed checks are reported as False instead of an error status.
    """
    checks = {
        name: PermissionCheck(
            subject_id=subject_id,
            action=name,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        for name in dict.fromkeys(permission)
    }

    try:
        results = await authz.batch_check_permissions(list(checks.values()))
    except AuthorizationError:
        results = {}

    return PermissionStatusResponse(
        entity_type=entity_type,
        entity_id=entity_id,
        permissions={
            str(name): (
                results[check.key].allowed if check.key in results else False
            )
            for name, check in checks.items()
        },
    )


@router.get("/cache")
async def get_cache_stats(
    _: Annotated[str, Depends(require_system_admin)],
    authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
) -> CacheStatsResponse:
    """Permission cache statistics. System admins only."""
    return CacheStatsResponse.from_stats(authz.cache_stats())


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(
    _: Annotated[str, Depends(require_system_admin)],
    authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
) -> None:
    """Drop every cached permission answer. System admins only."""
    authz.clear_cache()
