"""FastAPI dependencies for IAM bounded context."""

from iam.dependencies.authorization import (
    check_permission_or_deny,
    create_data_sync_service,
    get_current_subject_id,
    get_data_sync_service,
    require_permission,
    require_system_admin,
)

__all__ = [
    "check_permission_or_deny",
    "create_data_sync_service",
    "get_current_subject_id",
    "get_data_sync_service",
    "require_permission",
    "require_system_admin",
]
