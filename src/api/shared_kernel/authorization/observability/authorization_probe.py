"""Domain probe for authorization operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to schema bootstrap, relationship writes,
permission checks, and permission cache maintenance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for authorization operations."""

    def schema_written(self, schema_size: int) -> None:
        """Record that the authorization schema was installed."""
        ...

    def schema_write_failed(self, error: Exception) -> None:
        """Record that installing the authorization schema failed."""
        ...

    def not_initialized(self, operation: str) -> None:
        """Record that an operation was attempted before schema bootstrap."""
        ...

    def relationships_written(self, relationships: list[str]) -> None:
        """Record that relationships were written."""
        ...

    def relationships_write_failed(
        self,
        relationships: list[str],
        error: Exception,
    ) -> None:
        """Record that writing relationships failed."""
        ...

    def relationships_deleted(self, relationships: list[str]) -> None:
        """Record that relationships were deleted."""
        ...

    def relationships_delete_failed(
        self,
        relationships: list[str],
        error: Exception,
    ) -> None:
        """Record that deleting relationships failed."""
        ...

    def permission_checked(
        self,
        resource: str,
        permission: str,
        subject: str,
        granted: bool,
        cached: bool,
    ) -> None:
        """Record that a permission was checked."""
        ...

    def permission_check_failed(
        self,
        resource: str,
        permission: str,
        subject: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        ...

    def bulk_check_completed(
        self,
        total_requests: int,
        cached_count: int,
        permitted_count: int,
        failed_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        ...

    def cache_invalidated(self, resource: str, removed: int) -> None:
        """Record that cache entries were invalidated for a resource."""
        ...

    def connection_failed(
        self,
        endpoint: str,
        error: Exception,
    ) -> None:
        """Record that connection to authorization system failed."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def schema_written(self, schema_size: int) -> None:
        """Record that the authorization schema was installed."""
        self._logger.info(
            "authorization_schema_written",
            schema_size=schema_size,
            **self._get_context_kwargs(),
        )

    def schema_write_failed(self, error: Exception) -> None:
        """Record that installing the authorization schema failed."""
        self._logger.error(
            "authorization_schema_write_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def not_initialized(self, operation: str) -> None:
        """Record that an operation was attempted before schema bootstrap."""
        self._logger.error(
            "authorization_not_initialized",
            operation=operation,
            **self._get_context_kwargs(),
        )

    def relationships_written(self, relationships: list[str]) -> None:
        """Record that relationships were written."""
        self._logger.info(
            "authorization_relationships_written",
            relationships=relationships,
            count=len(relationships),
            **self._get_context_kwargs(),
        )

    def relationships_write_failed(
        self,
        relationships: list[str],
        error: Exception,
    ) -> None:
        """Record that writing relationships failed."""
        self._logger.error(
            "authorization_relationships_write_failed",
            relationships=relationships,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def relationships_deleted(self, relationships: list[str]) -> None:
        """Record that relationships were deleted."""
        self._logger.info(
            "authorization_relationships_deleted",
            relationships=relationships,
            count=len(relationships),
            **self._get_context_kwargs(),
        )

    def relationships_delete_failed(
        self,
        relationships: list[str],
        error: Exception,
    ) -> None:
        """Record that deleting relationships failed."""
        self._logger.error(
            "authorization_relationships_delete_failed",
            relationships=relationships,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def permission_checked(
        self,
        resource: str,
        permission: str,
        subject: str,
        granted: bool,
        cached: bool,
    ) -> None:
        """Record that a permission was checked."""
        self._logger.debug(
            "authorization_permission_checked",
            resource=resource,
            permission=permission,
            subject=subject,
            granted=granted,
            cached=cached,
            **self._get_context_kwargs(),
        )

    def permission_check_failed(
        self,
        resource: str,
        permission: str,
        subject: str,
        error: Exception,
    ) -> None:
        """Record that checking a permission failed."""
        self._logger.error(
            "authorization_permission_check_failed",
            resource=resource,
            permission=permission,
            subject=subject,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def bulk_check_completed(
        self,
        total_requests: int,
        cached_count: int,
        permitted_count: int,
        failed_count: int,
    ) -> None:
        """Record that a bulk permission check completed."""
        self._logger.info(
            "authorization_bulk_check_completed",
            total_requests=total_requests,
            cached_count=cached_count,
            permitted_count=permitted_count,
            failed_count=failed_count,
            **self._get_context_kwargs(),
        )

    def cache_invalidated(self, resource: str, removed: int) -> None:
        """Record that cache entries were invalidated for a resource."""
        self._logger.debug(
            "authorization_cache_invalidated",
            resource=resource,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def connection_failed(
        self,
        endpoint: str,
        error: Exception,
    ) -> None:
        """Record that connection to authorization system failed."""
        self._logger.error(
            "authorization_connection_failed",
            endpoint=endpoint,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
