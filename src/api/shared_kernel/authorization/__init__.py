"""Authorization primitives for fine-grained access control.

This module provides the shared authorization types, the permission cache,
and the cache-fronted authorization client used across bounded contexts for
SpiceDB integration.
"""

from shared_kernel.authorization.cache import CacheStats, PermissionCache
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.exceptions import (
    AuthorizationError,
    CheckFailedError,
    NotInitializedError,
    PermissionDeniedError,
    SchemaWriteFailedError,
    WriteFailedError,
)
from shared_kernel.authorization.protocols import (
    AuthorizationProvider,
    CheckResult,
    RelationshipStore,
)
from shared_kernel.authorization.types import (
    SYSTEM_ENTITY_ID,
    ObjectRef,
    Permission,
    PermissionCheck,
    RelationType,
    RelationshipTuple,
    ResourceType,
    SubjectRef,
    format_resource,
    format_subject,
)

__all__ = [
    "AuthorizationClient",
    "AuthorizationError",
    "AuthorizationProvider",
    "CacheStats",
    "CheckFailedError",
    "CheckResult",
    "NotInitializedError",
    "ObjectRef",
    "Permission",
    "PermissionCache",
    "PermissionCheck",
    "PermissionDeniedError",
    "RelationType",
    "RelationshipStore",
    "RelationshipTuple",
    "ResourceType",
    "SYSTEM_ENTITY_ID",
    "SchemaWriteFailedError",
    "SubjectRef",
    "WriteFailedError",
    "format_resource",
    "format_subject",
]
