"""Reconciliation service for IAM bounded context.

Rebuilds every authorization relationship from the relational database in
one sweep: system admins, tenants, memberships, sites, then devices. Each
row becomes one sync operation. Writes are upserts, so running the sweep
again converges to the same state.

Reconciliation only adds relationships. Stale relationships for rows that
no longer exist are left in place.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from iam.application.observability import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)
from iam.application.services.data_sync_service import DataSyncService
from iam.application.value_objects import (
    ReconciliationCategory,
    ReconciliationError,
    ReconciliationReport,
    SyncOperation,
)
from iam.ports.repositories import IRelationalStateReader


class ReconciliationService:
    """One-shot sweep from relational state into the authorization service."""

    def __init__(
        self,
        reader: IRelationalStateReader,
        sync_service: DataSyncService,
        probe: ReconciliationProbe | None = None,
    ):
        """Initialize ReconciliationService with dependencies.

        Args:
            reader: Read-only access to the relational source of truth
            sync_service: Applies each planned operation with retries
            probe: Optional domain probe for observability
        """
        self._reader = reader
        self._sync = sync_service
        self._probe = probe or DefaultReconciliationProbe()

    async def run(self, dry_run: bool = False) -> ReconciliationReport:
        """Sweep every category and report what was (or would be) synced.

        Failures never stop the sweep; they are collected in the report.

        Args:
            dry_run: Read and translate everything but write nothing
        """
        report = ReconciliationReport(dry_run=dry_run)
        self._probe.reconciliation_started(dry_run=dry_run)
        translator = self._sync.translator

        await self._sweep(
            report,
            ReconciliationCategory.SYSTEM_ADMINS,
            self._reader.list_system_admins,
            lambda admin: (
                f"user:{admin.user_id}",
                translator.system_admin_granted(admin.user_id),
            ),
        )
        await self._sweep(
            report,
            ReconciliationCategory.TENANTS,
            self._reader.list_active_tenants,
            lambda tenant: (
                f"tenant:{tenant.id}",
                translator.tenant_created(tenant.id, tenant.owner_id),
            ),
        )
        await self._sweep(
            report,
            ReconciliationCategory.MEMBERSHIPS,
            self._reader.list_active_memberships,
            lambda membership: (
                f"tenant:{membership.tenant_id}@user:{membership.user_id}",
                translator.user_joined_tenant(
                    membership.tenant_id, membership.user_id, membership.role
                ),
            ),
        )
        await self._sweep(
            report,
            ReconciliationCategory.SITES,
            self._reader.list_active_sites,
            lambda site: (
                f"site:{site.id}",
                translator.site_created(site.id, site.tenant_id, site.manager_id),
            ),
        )
        await self._sweep(
            report,
            ReconciliationCategory.DEVICES,
            self._reader.list_active_devices,
            lambda device: (
                f"device:{device.id}",
                translator.device_created(device.id, device.site_id),
            ),
        )

        self._probe.reconciliation_completed(
            dry_run=dry_run,
            total_operations=report.total_operations,
            error_count=len(report.errors),
        )
        return report

    async def _sweep(
        self,
        report: ReconciliationReport,
        category: ReconciliationCategory,
        load: Callable[[], Awaitable[Sequence[Any]]],
        plan: Callable[[Any], tuple[str, SyncOperation]],
    ) -> None:
        try:
            records = await load()
        except Exception as e:
            self._probe.category_read_failed(category=category, error=e)
            report.errors.append(
                ReconciliationError(category=category, item=None, message=str(e))
            )
            return

        for record in records:
            item, operation = plan(record)
            report.operations[category] += 1

            if report.dry_run:
                self._probe.item_planned(
                    category=category,
                    operation=operation.name,
                    relationships=[str(r) for r in operation.relationships],
                )
                continue

            outcome = await self._sync.execute(operation)
            if not outcome.succeeded:
                message = str(outcome.error) if outcome.error else "sync failed"
                self._probe.item_failed(category=category, item=item, error=message)
                report.errors.append(
                    ReconciliationError(category=category, item=item, message=message)
                )

        self._probe.category_swept(
            category=category,
            operations=report.operations[category],
            failures=report.failures_in(category),
        )
