"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def authorization_bootstrapped(self, endpoint: str) -> None:
        """Record that the authorization schema was installed at startup."""
        ...

    def authorization_bootstrap_failed(self, endpoint: str, error: str) -> None:
        """Record that schema bootstrap failed; the service starts degraded."""
        ...

    def authorization_disabled(self) -> None:
        """Record that schema bootstrap is disabled by configuration."""
        ...

    def system_admin_bootstrapped(self, user_id: str, succeeded: bool) -> None:
        """Record the outcome of granting the configured system admin."""
        ...

    def shutdown_completed(self) -> None:
        """Record that application resources were released."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def authorization_bootstrapped(self, endpoint: str) -> None:
        self._logger.info(
            "authorization_bootstrapped",
            endpoint=endpoint,
            **self._get_context_kwargs(),
        )

    def authorization_bootstrap_failed(self, endpoint: str, error: str) -> None:
        self._logger.error(
            "authorization_bootstrap_failed",
            endpoint=endpoint,
            error=error,
            **self._get_context_kwargs(),
        )

    def authorization_disabled(self) -> None:
        self._logger.warning(
            "authorization_disabled",
            **self._get_context_kwargs(),
        )

    def system_admin_bootstrapped(self, user_id: str, succeeded: bool) -> None:
        log = self._logger.info if succeeded else self._logger.warning
        log(
            "system_admin_bootstrapped",
            user_id=user_id,
            succeeded=succeeded,
            **self._get_context_kwargs(),
        )

    def shutdown_completed(self) -> None:
        self._logger.info(
            "shutdown_completed",
            **self._get_context_kwargs(),
        )
