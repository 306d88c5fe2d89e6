"""Protocol for reconciliation observability.

Defines the interface for domain probes that capture the progress of a
full sweep rebuilding authorization relationships from relational state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ReconciliationProbe(Protocol):
    """Domain probe for reconciliation runs."""

    def reconciliation_started(self, dry_run: bool) -> None:
        """Record that a reconciliation run started."""
        ...

    def category_read_failed(self, category: str, error: Exception) -> None:
        """Record that the rows of a category could not be read."""
        ...

    def item_planned(
        self, category: str, operation: str, relationships: list[str]
    ) -> None:
        """Record an operation a dry run would have applied."""
        ...

    def item_failed(self, category: str, item: str, error: str) -> None:
        """Record that syncing a single row failed."""
        ...

    def category_swept(self, category: str, operations: int, failures: int) -> None:
        """Record the totals for one category."""
        ...

    def reconciliation_completed(
        self, dry_run: bool, total_operations: int, error_count: int
    ) -> None:
        """Record that a reconciliation run finished."""
        ...

    def with_context(self, context: ObservationContext) -> ReconciliationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReconciliationProbe:
    """Default implementation of ReconciliationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultReconciliationProbe:
        """Create a new probe with observation context bound."""
        return DefaultReconciliationProbe(logger=self._logger, context=context)

    def reconciliation_started(self, dry_run: bool) -> None:
        self._logger.info(
            "reconciliation_started",
            dry_run=dry_run,
            **self._get_context_kwargs(),
        )

    def category_read_failed(self, category: str, error: Exception) -> None:
        self._logger.error(
            "reconciliation_category_read_failed",
            category=category,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def item_planned(
        self, category: str, operation: str, relationships: list[str]
    ) -> None:
        self._logger.debug(
            "reconciliation_item_planned",
            category=category,
            operation=operation,
            relationships=relationships,
            **self._get_context_kwargs(),
        )

    def item_failed(self, category: str, item: str, error: str) -> None:
        self._logger.warning(
            "reconciliation_item_failed",
            category=category,
            item=item,
            error=error,
            **self._get_context_kwargs(),
        )

    def category_swept(self, category: str, operations: int, failures: int) -> None:
        self._logger.info(
            "reconciliation_category_swept",
            category=category,
            operations=operations,
            failures=failures,
            **self._get_context_kwargs(),
        )

    def reconciliation_completed(
        self, dry_run: bool, total_operations: int, error_count: int
    ) -> None:
        log = self._logger.info if error_count == 0 else self._logger.warning
        log(
            "reconciliation_completed",
            dry_run=dry_run,
            total_operations=total_operations,
            error_count=error_count,
            **self._get_context_kwargs(),
        )
