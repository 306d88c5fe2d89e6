"""Protocol for access enforcement observability.

Defines the interface for domain probes that capture the decisions made
by the permission enforcement dependencies guarding HTTP routes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AccessProbe(Protocol):
    """Domain probe for access enforcement decisions."""

    def access_granted(
        self,
        subject_id: str,
        permission: str,
        resource: str,
        via_system_admin: bool,
    ) -> None:
        """Record that a request was allowed through."""
        ...

    def access_denied(self, subject_id: str, permission: str, resource: str) -> None:
        """Record that a request was denied."""
        ...

    def access_check_failed(
        self,
        subject_id: str,
        permission: str,
        resource: str,
        error: Exception,
    ) -> None:
        """Record that a check could not be answered and the request was denied."""
        ...

    def subject_missing(self, path: str) -> None:
        """Record a request reaching an enforcement point unauthenticated."""
        ...

    def with_context(self, context: ObservationContext) -> AccessProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAccessProbe:
    """Default implementation of AccessProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAccessProbe:
        """Create a new probe with observation context bound."""
        return DefaultAccessProbe(logger=self._logger, context=context)

    def access_granted(
        self,
        subject_id: str,
        permission: str,
        resource: str,
        via_system_admin: bool,
    ) -> None:
        self._logger.debug(
            "access_granted",
            subject_id=subject_id,
            permission=permission,
            resource=resource,
            via_system_admin=via_system_admin,
            **self._get_context_kwargs(),
        )

    def access_denied(self, subject_id: str, permission: str, resource: str) -> None:
        self._logger.info(
            "access_denied",
            subject_id=subject_id,
            permission=permission,
            resource=resource,
            **self._get_context_kwargs(),
        )

    def access_check_failed(
        self,
        subject_id: str,
        permission: str,
        resource: str,
        error: Exception,
    ) -> None:
        self._logger.error(
            "access_check_failed",
            subject_id=subject_id,
            permission=permission,
            resource=resource,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def subject_missing(self, path: str) -> None:
        self._logger.warning(
            "access_subject_missing",
            path=path,
            **self._get_context_kwargs(),
        )
