"""Rebuild authorization relationships from the relational database.

Sweeps system admins, tenants, memberships, sites and devices and writes
the relationship tuples encoding them. Safe to run repeatedly; existing
relationships are upserted.

Usage:
    fleetgate-reconcile [--dry-run] [--skip-schema]

Environment Variables:
    FLEETGATE_DB_*: Relational database connection (see DatabaseSettings)
    FLEETGATE_AUTHZ_*: SpiceDB connection and retry policy
        (see AuthorizationSettings)

Exit status is 0 when every operation succeeded, 1 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich import box
from rich.console import Console
from rich.table import Table

from iam.application.services.reconciliation_service import ReconciliationService
from iam.application.value_objects import ReconciliationCategory, ReconciliationReport
from iam.dependencies.authorization import create_data_sync_service
from iam.infrastructure.relational_state_reader import RelationalStateReader
from infrastructure.authorization_dependencies import create_authorization_client
from infrastructure.database.engines import (
    create_read_engine,
    create_read_sessionmaker,
)
from infrastructure.logging import configure_logging
from infrastructure.settings import (
    AuthorizationSettings,
    DatabaseSettings,
    get_authorization_settings,
    get_database_settings,
    get_settings,
)
from shared_kernel.authorization.exceptions import SchemaWriteFailedError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetgate-reconcile",
        description=(
            "Rebuild authorization relationships in SpiceDB from the "
            "relational database."
        ),
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read and translate everything, write nothing",
    )
    parser.add_argument(
        "--skip-schema",
        action="store_true",
        help="Do not write the authorization schema before syncing",
    )
    return parser


def render_report(report: ReconciliationReport, console: Console) -> None:
    """Print per-category totals and any errors."""
    title = "Reconciliation (dry run)" if report.dry_run else "Reconciliation"
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Category", style="cyan")
    table.add_column("Planned" if report.dry_run else "Synced", justify="right")
    table.add_column("Failed", justify="right")

    for category in ReconciliationCategory:
        failures = report.failures_in(category)
        failure_style = "red" if failures else "green"
        table.add_row(
            category.value,
            f"{report.operations[category]:,}",
            f"[{failure_style}]{failures:,}[/]",
        )
    table.add_row(
        "[bold]total[/bold]",
        f"[bold]{report.total_operations:,}[/bold]",
        f"[bold]{len(report.errors):,}[/bold]",
    )
    console.print(table)

    for error in report.errors:
        item = error.item or "(category could not be read)"
        console.print(f"[red]✗[/red] {error.category}: {item}: {error.message}")

    if report.ok:
        console.print("[green]✓[/green] Reconciliation completed without errors")
    else:
        console.print(
            f"[bold red]Reconciliation completed with {len(report.errors)} "
            "error(s)[/bold red]"
        )


async def reconcile(
    dry_run: bool,
    skip_schema: bool,
    authz_settings: AuthorizationSettings,
    db_settings: DatabaseSettings,
    console: Console,
) -> int:
    """Run one reconciliation and return the process exit status."""
    authz = create_authorization_client(authz_settings)
    engine = create_read_engine(db_settings)
    try:
        if not dry_run:
            if skip_schema:
                authz.assume_schema_installed()
            else:
                try:
                    await authz.bootstrap_schema()
                except SchemaWriteFailedError as e:
                    console.print(f"[bold red]Error:[/bold red] {e}")
                    return 1

        service = ReconciliationService(
            reader=RelationalStateReader(create_read_sessionmaker(engine)),
            sync_service=create_data_sync_service(authz, authz_settings),
        )
        report = await service.run(dry_run=dry_run)
    finally:
        await authz.close()
        await engine.dispose()

    render_report(report, console)
    return 0 if report.ok else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    return asyncio.run(
        reconcile(
            dry_run=args.dry_run,
            skip_schema=args.skip_schema,
            authz_settings=get_authorization_settings(),
            db_settings=get_database_settings(),
            console=Console(),
        )
    )


if __name__ == "__main__":
    sys.exit(main())
