"""Data sync service for IAM bounded context.

Mirrors committed relational changes into the authorization service. The
relational database is the source of truth: a sync failure is retried a
bounded number of times, then reported and swallowed, and the relational
change is never rolled back. Drift left behind is repaired by the
reconciliation job.

Callers invoke these methods after their database transaction commits.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from iam.application.observability import DataSyncProbe, DefaultDataSyncProbe
from iam.application.translator import SyncOperationTranslator
from iam.application.value_objects import (
    RetryPolicy,
    RoleChangeOutcome,
    SyncAction,
    SyncOperation,
    SyncOptions,
    SyncOutcome,
    SyncSummary,
)
from iam.domain.value_objects import TenantRole
from shared_kernel.authorization.exceptions import NotInitializedError
from shared_kernel.authorization.protocols import AuthorizationProvider

Sleep = Callable[[float], Awaitable[Any]]


class DataSyncService:
    """Translates relational events into relationship writes and deletes."""

    def __init__(
        self,
        authz: AuthorizationProvider,
        retry_policy: RetryPolicy | None = None,
        probe: DataSyncProbe | None = None,
        translator: SyncOperationTranslator | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize DataSyncService with dependencies.

        Args:
            authz: Authorization client the relationships are written through
            retry_policy: Retry count and backoff applied to every operation
            probe: Optional domain probe for observability
            translator: Builds the relationships for each event
            sleep: Awaitable used for backoff delays
        """
        self._authz = authz
        self._retry_policy = retry_policy or RetryPolicy()
        self._probe = probe or DefaultDataSyncProbe()
        self._translator = translator or SyncOperationTranslator()
        self._sleep = sleep

    @property
    def translator(self) -> SyncOperationTranslator:
        return self._translator

    async def sync_tenant_creation(
        self,
        tenant_id: str,
        owner_id: str | None,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Link a new tenant to the system and record its owner."""
        return await self.execute(
            self._translator.tenant_created(tenant_id, owner_id), options
        )

    async def sync_user_tenant_association(
        self,
        tenant_id: str,
        user_id: str,
        role: TenantRole | str,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Grant a user their tenant role.

        An unknown role is reported and returned as a failed outcome without
        any write.
        """
        name = "sync_user_tenant_association"
        context = {"tenant_id": tenant_id, "user_id": user_id, "role": str(role)}
        try:
            parsed = TenantRole.from_string(role)
        except ValueError as e:
            return self._reject(name, e, context)
        operation = self._translator.user_joined_tenant(tenant_id, user_id, parsed)
        return await self.execute(operation, options)

    async def sync_user_tenant_removal(
        self,
        tenant_id: str,
        user_id: str,
        role: TenantRole | str,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Revoke a user's tenant role. An unknown role fails without a delete."""
        name = "sync_user_tenant_removal"
        context = {"tenant_id": tenant_id, "user_id": user_id, "role": str(role)}
        try:
            parsed = TenantRole.from_string(role)
        except ValueError as e:
            return self._reject(name, e, context)
        operation = self._translator.user_left_tenant(tenant_id, user_id, parsed)
        return await self.execute(operation, options)

    async def sync_user_role_change(
        self,
        tenant_id: str,
        user_id: str,
        old_role: TenantRole | str,
        new_role: TenantRole | str,
        options: SyncOptions | None = None,
    ) -> RoleChangeOutcome:
        """Replace a user's tenant role: remove the old, then grant the new.

        The two halves are retried independently. Between them the user holds
        neither role, so checks fail closed; if the process dies in between,
        reconciliation restores the new role. If either role is unknown,
        nothing is removed or granted and the association outcome carries
        the error.
        """
        context = {
            "tenant_id": tenant_id,
            "user_id": user_id,
            "old_role": str(old_role),
            "new_role": str(new_role),
        }
        try:
            old = TenantRole.from_string(old_role)
            new = TenantRole.from_string(new_role)
        except ValueError as e:
            return RoleChangeOutcome(
                removal=None,
                association=self._reject("sync_user_role_change", e, context),
            )

        removal = None
        if old.to_relation() != new.to_relation():
            removal = await self.execute(
                self._translator.user_left_tenant(tenant_id, user_id, old), options
            )
        association = await self.execute(
            self._translator.user_joined_tenant(tenant_id, user_id, new), options
        )
        return RoleChangeOutcome(removal=removal, association=association)

    async def sync_site_creation(
        self,
        site_id: str,
        tenant_id: str,
        manager_id: str | None = None,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Attach a new site to its tenant and optionally record its manager."""
        return await self.execute(
            self._translator.site_created(site_id, tenant_id, manager_id), options
        )

    async def sync_device_creation(
        self,
        device_id: str,
        site_id: str,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Attach a new device to its site."""
        return await self.execute(
            self._translator.device_created(device_id, site_id), options
        )

    async def sync_system_admin(
        self,
        user_id: str,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Grant platform-wide administration to a user."""
        return await self.execute(
            self._translator.system_admin_granted(user_id), options
        )

    async def batch_sync(
        self,
        operations: Iterable[Callable[[], Awaitable[Any]]],
    ) -> SyncSummary:
        """Run sync thunks one after another and total their outcomes.

        A thunk fails if it raises or returns an outcome that did not succeed.
        """
        succeeded = 0
        failed = 0
        errors: list[str] = []

        for thunk in operations:
            try:
                result = await thunk()
            except Exception as e:
                failed += 1
                errors.append(str(e))
                continue

            if getattr(result, "succeeded", True):
                succeeded += 1
            else:
                failed += 1
                errors.append(_describe_failure(result))

        self._probe.batch_completed(succeeded=succeeded, failed=failed)
        return SyncSummary(succeeded=succeeded, failed=failed, errors=errors)

    async def execute(
        self,
        operation: SyncOperation,
        options: SyncOptions | None = None,
    ) -> SyncOutcome:
        """Apply a sync operation with bounded retries. Never raises."""
        options = options or SyncOptions()
        max_retries = 0
        if options.retry_on_failure:
            max_retries = (
                self._retry_policy.max_retries
                if options.max_retries is None
                else options.max_retries
            )

        attempts = 0
        while True:
            attempts += 1
            try:
                await self._apply(operation)
            except NotInitializedError as e:
                self._probe.sync_not_initialized(
                    operation=operation.name, error=e, context=operation.context
                )
                return SyncOutcome(
                    operation=operation.name,
                    succeeded=False,
                    attempts=attempts,
                    error=e,
                )
            except Exception as e:
                retries_made = attempts - 1
                if retries_made >= max_retries:
                    if options.log_errors:
                        self._probe.sync_abandoned(
                            operation=operation.name,
                            attempts=attempts,
                            error=e,
                            context=operation.context,
                        )
                    return SyncOutcome(
                        operation=operation.name,
                        succeeded=False,
                        attempts=attempts,
                        error=e,
                    )

                delay = self._retry_policy.delay_before_retry(retries_made)
                self._probe.retry_scheduled(
                    operation=operation.name,
                    attempt=attempts,
                    delay_seconds=delay,
                    error=e,
                    context=operation.context,
                )
                await self._sleep(delay)
                continue

            self._probe.sync_succeeded(
                operation=operation.name,
                attempts=attempts,
                context=operation.context,
            )
            return SyncOutcome(
                operation=operation.name, succeeded=True, attempts=attempts
            )

    def _reject(
        self, operation: str, error: Exception, context: dict[str, str]
    ) -> SyncOutcome:
        self._probe.sync_rejected(operation=operation, error=error, context=context)
        return SyncOutcome(
            operation=operation, succeeded=False, attempts=0, error=error
        )

    async def _apply(self, operation: SyncOperation) -> None:
        if operation.action is SyncAction.WRITE:
            await self._authz.write_relationships(operation.relationships)
        else:
            await self._authz.delete_relationships(operation.relationships)


def _describe_failure(result: Any) -> str:
    if isinstance(result, RoleChangeOutcome):
        failed = [
            outcome
            for outcome in (result.removal, result.association)
            if outcome is not None and not outcome.succeeded
        ]
        return "; ".join(_describe_failure(outcome) for outcome in failed)
    error = getattr(result, "error", None)
    operation = getattr(result, "operation", "sync")
    if error is not None:
        return f"{operation}: {error}"
    return f"{operation} failed"
