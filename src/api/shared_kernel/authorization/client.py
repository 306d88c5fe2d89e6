"""Authorization client with an interposed permission cache.

`AuthorizationClient` is the single entry point application code uses to
talk to the relationship store. It owns schema bootstrap, keeps the
permission cache coherent with relationship writes made through it, and
translates transport failures into the authorization error taxonomy.

This layer never retries. Write retry policy belongs to the data sync
service; check failures are surfaced to callers, who must fail closed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from shared_kernel.authorization.cache import CacheStats, PermissionCache
from shared_kernel.authorization.exceptions import (
    CheckFailedError,
    NotInitializedError,
    PermissionDeniedError,
    SchemaWriteFailedError,
    WriteFailedError,
)
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.protocols import CheckResult, RelationshipStore
from shared_kernel.authorization.types import (
    SYSTEM_ENTITY_ID,
    Permission,
    PermissionCheck,
    RelationshipTuple,
    ResourceType,
)


class AuthorizationClient:
    """Cache-fronted client for the relationship store.

    One instance is built per process at startup and shared by injection
    with request handlers, the data sync service, and the reconciliation job.
    """

    def __init__(
        self,
        store: RelationshipStore,
        schema: str,
        cache: PermissionCache | None = None,
        probe: AuthorizationProbe | None = None,
        max_concurrent_checks: int = 20,
        invalidate_subjects: bool = False,
    ):
        """Initialize the client.

        Args:
            store: Relationship store backend (SpiceDB in production)
            schema: Authorization schema text installed by bootstrap_schema()
            cache: Permission cache; a default-sized one is created if omitted
            probe: Optional domain probe for observability
            max_concurrent_checks: Upper bound on in-flight backend checks
                issued by batch_check_permissions()
            invalidate_subjects: Also drop every cached answer of a user
                named as subject in a changed tuple, not only answers for the
                tuple's entity
        """
        if max_concurrent_checks < 1:
            raise ValueError("max_concurrent_checks must be at least 1")

        self._store = store
        self._schema = schema
        self._cache = cache if cache is not None else PermissionCache()
        self._probe = probe or DefaultAuthorizationProbe()
        self._check_slots = asyncio.Semaphore(max_concurrent_checks)
        self._invalidate_subjects = invalidate_subjects
        self._initialized = False
        # Bumped on every relationship change; a check that started before a
        # change must not repopulate the cache with a pre-change answer.
        self._epoch = 0

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def cache(self) -> PermissionCache:
        return self._cache

    async def bootstrap_schema(self) -> None:
        """Install the authorization schema in the backend.

        Safe to call repeatedly. Every other operation raises
        NotInitializedError until this has completed successfully.

        Raises:
            SchemaWriteFailedError: If the backend rejects or cannot receive
                the schema
        """
        try:
            await self._store.write_schema(self._schema)
        except Exception as e:
            self._probe.schema_write_failed(error=e)
            raise SchemaWriteFailedError(
                f"Failed to write authorization schema: {e}"
            ) from e

        self._initialized = True
        self._probe.schema_written(schema_size=len(self._schema))

    def assume_schema_installed(self) -> None:
        """Treat the schema already present in the backend as current.

        For operators who manage the schema out of band; no backend call is
        made and a missing schema surfaces as write or check failures.
        """
        self._initialized = True

    async def write_relationship(self, relationship: RelationshipTuple) -> None:
        """Write one relationship. See write_relationships()."""
        await self.write_relationships([relationship])

    async def write_relationships(
        self, relationships: Sequence[RelationshipTuple]
    ) -> None:
        """Write relationships in one backend call.

        Invalidates cached answers for every entity touched, also when the
        backend call fails, since a failed call may still have been applied.

        Raises:
            NotInitializedError: If the schema was not bootstrapped
            WriteFailedError: If the backend write fails
        """
        self._ensure_initialized("write relationships")
        if not relationships:
            return

        described = [str(r) for r in relationships]
        try:
            await self._store.write_relationships(list(relationships))
        except Exception as e:
            # The backend may have applied the write before failing
            self._invalidate(relationships)
            self._probe.relationships_write_failed(relationships=described, error=e)
            raise WriteFailedError(
                f"Failed to write relationships: {', '.join(described)}"
            ) from e

        self._invalidate(relationships)
        self._probe.relationships_written(relationships=described)

    async def delete_relationship(self, relationship: RelationshipTuple) -> None:
        """Delete one relationship. See delete_relationships()."""
        await self.delete_relationships([relationship])

    async def delete_relationships(
        self, relationships: Sequence[RelationshipTuple]
    ) -> None:
        """Delete relationships in one backend call.

        Same invalidation contract as write_relationships().

        Raises:
            NotInitializedError: If the schema was not bootstrapped
            WriteFailedError: If the backend delete fails
        """
        self._ensure_initialized("delete relationships")
        if not relationships:
            return

        described = [str(r) for r in relationships]
        try:
            await self._store.delete_relationships(list(relationships))
        except Exception as e:
            self._invalidate(relationships)
            self._probe.relationships_delete_failed(relationships=described, error=e)
            raise WriteFailedError(
                f"Failed to delete relationships: {', '.join(described)}"
            ) from e

        self._invalidate(relationships)
        self._probe.relationships_deleted(relationships=described)

    async def check_permission(
        self,
        subject_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
        use_cache: bool = True,
    ) -> bool:
        """Check if a user may perform an action on an entity.

        Args:
            subject_id: User identifier
            action: Permission name (e.g., "manage")
            entity_type: Entity type (e.g., "tenant")
            entity_id: Entity identifier
            use_cache: Consult the cache before asking the backend. The
                fresh answer is cached either way.

        Returns:
            True if permission is granted, False otherwise. Denial is never
            an exception.

        Raises:
            NotInitializedError: If the schema was not bootstrapped
            CheckFailedError: If the backend could not answer
        """
        self._ensure_initialized("check permission")
        check = PermissionCheck(
            subject_id=subject_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
        )

        if use_cache:
            cached = self._cache.get(check)
            if cached is not None:
                self._record_checked(check, cached, cached=True)
                return cached

        return await self._check_and_cache(check)

    async def batch_check_permissions(
        self,
        checks: Sequence[PermissionCheck],
    ) -> dict[str, CheckResult]:
        """Check many permissions at once.

        Cached answers are served directly; the rest are sent to the backend
        concurrently, at most `max_concurrent_checks` at a time. A failing
        check only affects its own result.

        Returns:
            Mapping of PermissionCheck.key to its CheckResult

        Raises:
            NotInitializedError: If the schema was not bootstrapped
        """
        self._ensure_initialized("batch check permissions")

        results: dict[str, CheckResult] = {}
        pending: dict[str, PermissionCheck] = {}

        for check in checks:
            if check.key in results or check.key in pending:
                continue
            cached = self._cache.get(check)
            if cached is not None:
                results[check.key] = CheckResult(
                    check=check, allowed=cached, cached=True
                )
            else:
                pending[check.key] = check

        cached_count = len(results)

        if pending:
            outcomes = await asyncio.gather(
                *(self._bounded_check(check) for check in pending.values())
            )
            for outcome in outcomes:
                results[outcome.check.key] = outcome

        self._probe.bulk_check_completed(
            total_requests=len(results),
            cached_count=cached_count,
            permitted_count=sum(1 for r in results.values() if r.allowed),
            failed_count=sum(1 for r in results.values() if r.failed),
        )
        return results

    async def assert_permission(
        self,
        subject_id: str,
        action: str,
        entity_type: str,
        entity_id: str,
    ) -> None:
        """Require a permission, for use at enforcement points.

        Raises:
            PermissionDeniedError: If the permission is not granted
            CheckFailedError: If the backend could not answer; callers must
                treat this as a denial
        """
        allowed = await self.check_permission(
            subject_id=subject_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        if not allowed:
            raise PermissionDeniedError(
                subject=f"{ResourceType.USER}:{subject_id}",
                action=action,
                resource=f"{entity_type}:{entity_id}",
            )

    async def is_system_admin(self, subject_id: str) -> bool:
        """Return True when the user administers the whole platform."""
        return await self.check_permission(
            subject_id=subject_id,
            action=Permission.MANAGE_ALL,
            entity_type=ResourceType.SYSTEM,
            entity_id=SYSTEM_ENTITY_ID,
        )

    def clear_cache(self) -> None:
        """Drop every cached permission answer."""
        self._epoch += 1
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    async def close(self) -> None:
        await self._store.close()

    def _ensure_initialized(self, operation: str) -> None:
        if not self._initialized:
            self._probe.not_initialized(operation=operation)
            raise NotInitializedError(operation)

    async def _bounded_check(self, check: PermissionCheck) -> CheckResult:
        async with self._check_slots:
            try:
                allowed = await self._check_and_cache(check)
            except CheckFailedError as e:
                return CheckResult(check=check, allowed=False, error=e)
        return CheckResult(check=check, allowed=allowed)

    async def _check_and_cache(self, check: PermissionCheck) -> bool:
        epoch = self._epoch
        try:
            allowed = await self._store.check_permission(
                entity=check.entity,
                permission=check.action,
                subject=check.subject,
            )
        except Exception as e:
            self._probe.permission_check_failed(
                resource=str(check.entity),
                permission=check.action,
                subject=str(check.subject),
                error=e,
            )
            raise CheckFailedError(f"Failed to check permission: {check.key}") from e

        if epoch == self._epoch:
            self._cache.set(check, allowed)
        self._record_checked(check, allowed, cached=False)
        return allowed

    def _record_checked(
        self, check: PermissionCheck, allowed: bool, cached: bool
    ) -> None:
        self._probe.permission_checked(
            resource=str(check.entity),
            permission=check.action,
            subject=str(check.subject),
            granted=allowed,
            cached=cached,
        )

    def _invalidate(self, relationships: Sequence[RelationshipTuple]) -> None:
        self._epoch += 1
        for relationship in relationships:
            entity = relationship.entity
            removed = self._cache.invalidate_entity(entity.type, entity.id)

            subject = relationship.subject
            if (
                self._invalidate_subjects
                and subject.type == ResourceType.USER
                and subject.relation is None
            ):
                removed += self._cache.invalidate_subject(subject.type, subject.id)

            if removed:
                self._probe.cache_invalidated(
                    resource=relationship.resource, removed=removed
                )
