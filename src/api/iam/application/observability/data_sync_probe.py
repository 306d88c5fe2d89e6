"""Protocol for data sync service observability.

Defines the interface for domain probes that capture the lifecycle of
sync operations mirroring relational changes into the authorization service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DataSyncProbe(Protocol):
    """Domain probe for data sync operations."""

    def sync_succeeded(
        self, operation: str, attempts: int, context: dict[str, str]
    ) -> None:
        """Record that a sync operation was applied."""
        ...

    def retry_scheduled(
        self,
        operation: str,
        attempt: int,
        delay_seconds: float,
        error: Exception,
        context: dict[str, str],
    ) -> None:
        """Record that a failed attempt will be retried after a delay."""
        ...

    def sync_abandoned(
        self,
        operation: str,
        attempts: int,
        error: Exception,
        context: dict[str, str],
    ) -> None:
        """Record that a sync operation failed after exhausting its retries."""
        ...

    def sync_not_initialized(
        self, operation: str, error: Exception, context: dict[str, str]
    ) -> None:
        """Record a sync attempted before the authorization schema was installed."""
        ...

    def sync_rejected(
        self, operation: str, error: Exception, context: dict[str, str]
    ) -> None:
        """Record a sync called with arguments that cannot be translated."""
        ...

    def batch_completed(self, succeeded: int, failed: int) -> None:
        """Record the totals of a batch sync."""
        ...

    def with_context(self, context: ObservationContext) -> DataSyncProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultDataSyncProbe:
    """Default implementation of DataSyncProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(
        self, ids: dict[str, str] | None = None
    ) -> dict[str, Any]:
        """Get operation ids and context metadata as kwargs for logging."""
        # Operation ids take precedence over the bound request context
        kwargs: dict[str, Any] = {}
        if self._context is not None:
            kwargs.update(self._context.as_dict())
        kwargs.update(ids or {})
        return kwargs

    def with_context(self, context: ObservationContext) -> DefaultDataSyncProbe:
        """Create a new probe with observation context bound."""
        return DefaultDataSyncProbe(logger=self._logger, context=context)

    def sync_succeeded(
        self, operation: str, attempts: int, context: dict[str, str]
    ) -> None:
        self._logger.info(
            "data_sync_succeeded",
            operation=operation,
            attempts=attempts,
            **self._get_context_kwargs(context),
        )

    def retry_scheduled(
        self,
        operation: str,
        attempt: int,
        delay_seconds: float,
        error: Exception,
        context: dict[str, str],
    ) -> None:
        self._logger.warning(
            "data_sync_retry_scheduled",
            operation=operation,
            attempt=attempt,
            delay_seconds=delay_seconds,
            error=str(error),
            **self._get_context_kwargs(context),
        )

    def sync_abandoned(
        self,
        operation: str,
        attempts: int,
        error: Exception,
        context: dict[str, str],
    ) -> None:
        self._logger.error(
            "data_sync_abandoned",
            operation=operation,
            attempts=attempts,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(context),
        )

    def sync_not_initialized(
        self, operation: str, error: Exception, context: dict[str, str]
    ) -> None:
        self._logger.error(
            "data_sync_not_initialized",
            operation=operation,
            error=str(error),
            **self._get_context_kwargs(context),
        )

    def sync_rejected(
        self, operation: str, error: Exception, context: dict[str, str]
    ) -> None:
        self._logger.error(
            "data_sync_rejected",
            operation=operation,
            error=str(error),
            **self._get_context_kwargs(context),
        )

    def batch_completed(self, succeeded: int, failed: int) -> None:
        self._logger.info(
            "data_sync_batch_completed",
            succeeded=succeeded,
            failed=failed,
            **self._get_context_kwargs(),
        )
