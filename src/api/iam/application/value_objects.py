"""Application-layer value objects for IAM bounded context.

These describe how relational changes are mirrored into the authorization
service: the operations themselves, the retry policy applied to them, and
the outcomes reported back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from shared_kernel.authorization.types import RelationshipTuple


class SyncAction(StrEnum):
    WRITE = "write"
    DELETE = "delete"


@dataclass(frozen=True)
class SyncOperation:
    """A set of relationships to write or delete for one relational event.

    Attributes:
        name: Operation name used in logs (e.g., "sync_tenant_creation")
        action: Whether the relationships are written or deleted
        relationships: Tuples applied in a single backend call
        context: Identifiers of the relational rows involved
    """

    name: str
    action: SyncAction
    relationships: tuple[RelationshipTuple, ...]
    context: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with linear backoff.

    A permanently failing operation is attempted `max_retries + 1` times.
    """

    max_retries: int = 3
    base_delay_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds must not be negative")

    def delay_before_retry(self, retries_made: int) -> float:
        """Seconds to wait before the next retry.

        Args:
            retries_made: Number of retries already performed (0-based)
        """
        return retries_made * self.base_delay_seconds


@dataclass(frozen=True)
class SyncOptions:
    """Per-call overrides of the service retry policy.

    Attributes:
        retry_on_failure: When False the operation is attempted exactly once
        max_retries: Overrides the policy's retry count when set
        log_errors: When False an abandoned operation is not reported
    """

    retry_on_failure: bool = True
    max_retries: int | None = None
    log_errors: bool = True

    def __post_init__(self) -> None:
        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries must not be negative")


@dataclass(frozen=True)
class SyncOutcome:
    """Result of one sync operation. Sync failures are reported, never raised."""

    operation: str
    succeeded: bool
    attempts: int
    error: Exception | None = None


@dataclass(frozen=True)
class RoleChangeOutcome:
    """Outcomes of the two independent halves of a role change.

    `removal` is None when both roles map to the same relation and nothing
    had to be removed.
    """

    removal: SyncOutcome | None
    association: SyncOutcome

    @property
    def succeeded(self) -> bool:
        removed = self.removal is None or self.removal.succeeded
        return removed and self.association.succeeded


@dataclass(frozen=True)
class SyncSummary:
    succeeded: int
    failed: int
    errors: list[str] = field(default_factory=list)


class ReconciliationCategory(StrEnum):
    """Kinds of relational rows swept by reconciliation, in sweep order."""

    SYSTEM_ADMINS = "system_admins"
    TENANTS = "tenants"
    MEMBERSHIPS = "memberships"
    SITES = "sites"
    DEVICES = "devices"


@dataclass(frozen=True)
class ReconciliationError:
    """A failure recorded during reconciliation.

    `item` is None when the whole category could not be read.
    """

    category: ReconciliationCategory
    item: str | None
    message: str


@dataclass
class ReconciliationReport:
    """Counts and errors collected by one reconciliation run.

    `operations` counts sync operations per category: planned ones in a dry
    run, attempted ones otherwise.
    """

    dry_run: bool
    operations: dict[ReconciliationCategory, int] = field(
        default_factory=lambda: {category: 0 for category in ReconciliationCategory}
    )
    errors: list[ReconciliationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def total_operations(self) -> int:
        return sum(self.operations.values())

    def failures_in(self, category: ReconciliationCategory) -> int:
        return sum(1 for error in self.errors if error.category == category)
