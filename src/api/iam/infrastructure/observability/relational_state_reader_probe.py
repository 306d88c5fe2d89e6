"""Domain probe for reading relational state.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events while the reconciliation job reads the
relational source of truth.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RelationalStateReaderProbe(Protocol):
    """Domain probe for relational state reads."""

    def rows_listed(self, table: str, count: int) -> None:
        """Record that rows were listed from a table."""
        ...

    def read_failed(self, table: str, error: Exception) -> None:
        """Record that listing rows from a table failed."""
        ...

    def with_context(self, context: ObservationContext) -> RelationalStateReaderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRelationalStateReaderProbe:
    """Default implementation of RelationalStateReaderProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultRelationalStateReaderProbe:
        """Create a new probe with observation context bound."""
        return DefaultRelationalStateReaderProbe(logger=self._logger, context=context)

    def rows_listed(self, table: str, count: int) -> None:
        self._logger.debug(
            "relational_rows_listed",
            table=table,
            count=count,
            **self._get_context_kwargs(),
        )

    def read_failed(self, table: str, error: Exception) -> None:
        self._logger.error(
            "relational_read_failed",
            table=table,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
