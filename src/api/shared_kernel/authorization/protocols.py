"""Authorization protocols.

`RelationshipStore` abstracts the external ReBAC backend (SpiceDB in
production, an in-memory fake in tests). `AuthorizationProvider` is the
interface consumers (sync service, enforcement dependencies) depend on; its
primary implementation is `AuthorizationClient`, which interposes the
permission cache in front of a `RelationshipStore`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from shared_kernel.authorization.exceptions import CheckFailedError
from shared_kernel.authorization.types import (
    ObjectRef,
    PermissionCheck,
    RelationshipTuple,
    SubjectRef,
)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check inside a batch.

    Attributes:
        check: The permission check that was evaluated
        allowed: Whether permission was granted (False when the check failed)
        error: The failure for this check only, if the backend could not answer
        cached: Whether the answer came from the permission cache
    """

    check: PermissionCheck
    allowed: bool
    error: CheckFailedError | None = None
    cached: bool = False

    @property
    def failed(self) -> bool:
        return self.error is not None


class RelationshipStore(Protocol):
    """Protocol for the external relationship-tuple store.

    Implementations surface every failure as an exception and never retry.
    """

    async def write_schema(self, schema: str) -> None:
        """Install the authorization schema (idempotent)."""
        ...

    async def write_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        """Upsert tuples in one backend call."""
        ...

    async def delete_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        """Delete tuples in one backend call. Missing tuples are ignored."""
        ...

    async def check_permission(
        self,
        entity: ObjectRef,
        permission: str,
        subject: SubjectRef,
    ) -> bool:
        """Return True when the subject holds the permission on the entity."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...


class AuthorizationProvider(Protocol):
    """Protocol for authorization providers used by application code."""

    async def write_relationship(self, relationship: RelationshipTuple) -> None:
        """Write a relationship.

        Raises:
            NotInitializedError: If the schema was not bootstrapped
            WriteFailedError: If the write fails
        """
        ...

    async def write_relationships(
        self, relationships: Sequence[RelationshipTuple]
    ) -> None:
        """Write several relationships in one logical call."""
        ...

    async def delete_relationship(self, relationship: RelationshipTuple) -> None:
        """Delete a relationship.

        Raises:
            NotInitializedError: If the schema was not bootstrapped
            WriteFailedError: If the delete fails
        """
        ...

    async def delete_relationships(
        self, relationships: Sequence[RelationshipTuple]
    ) -> None:
        """Delete several relationships in one logical call."""
        ...

    async def check_permission(
        self,
        subject_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
        use_cache: bool = True,
    ) -> bool:
        """Check if a subject has permission on an entity.

        Returns:
            True if permission is granted, False otherwise

        Raises:
            CheckFailedError: If the backend could not answer
        """
        ...

    async def batch_check_permissions(
        self,
        checks: Sequence[PermissionCheck],
    ) -> dict[str, CheckResult]:
        """Check many permissions; failures are isolated per check."""
        ...

    async def assert_permission(
        self,
        subject_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
    ) -> None:
        """Raise PermissionDeniedError unless permission is granted."""
        ...

    async def is_system_admin(self, subject_id: str) -> bool:
        """Return True when the subject administers the whole system."""
        ...
