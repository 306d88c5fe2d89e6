"""Process-local permission cache.

Maps a `PermissionCheck` to an allow/deny answer. Bounded both by entry
count (least recently used entries are evicted first) and by a per-entry TTL
(expired entries are treated as misses on lookup and evicted lazily).

Invalidation is entity-scoped: every entry checked against an entity is
removed when any tuple on that entity changes, whatever subject or action it
was cached for. A secondary index keeps that O(entries for the entity).

The cache is shared mutable state. It is only touched from the event loop
thread and none of its methods await, so no lock is taken.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from shared_kernel.authorization.types import ObjectRef, PermissionCheck, SubjectRef


@dataclass(frozen=True)
class CacheEntry:
    """A cached permission answer."""

    allowed: bool
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp >= self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache counters."""

    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int
    invalidations: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class PermissionCache:
    """TTL + LRU bounded cache of permission check results."""

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_size: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry
            max_size: Maximum number of entries before LRU eviction
            clock: Monotonic time source, injectable for tests
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[PermissionCheck, CacheEntry] = OrderedDict()
        self._by_entity: dict[ObjectRef, set[PermissionCheck]] = {}
        self._by_subject: dict[SubjectRef, set[PermissionCheck]] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._invalidations = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, check: PermissionCheck) -> bool:
        entry = self._entries.get(check)
        return entry is not None and not entry.is_expired(self._clock())

    def get(self, check: PermissionCheck) -> bool | None:
        """Return the cached answer, or None on miss or expiry."""
        entry = self._entries.get(check)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            self._remove(check)
            self._misses += 1
            return None

        self._entries.move_to_end(check)
        self._hits += 1
        return entry.allowed

    def set(self, check: PermissionCheck, allowed: bool) -> None:
        """Store an answer stamped with the current time."""
        if check in self._entries:
            self._remove(check)
        elif len(self._entries) >= self._max_size:
            self._make_room()

        self._entries[check] = CacheEntry(
            allowed=allowed,
            timestamp=self._clock(),
            ttl=self._ttl,
        )
        self._by_entity.setdefault(check.entity, set()).add(check)
        self._by_subject.setdefault(check.subject, set()).add(check)

    def invalidate_entity(self, entity_type: str, entity_id: str) -> int:
        """Drop every entry checked against the entity.

        Returns:
            Number of entries removed
        """
        checks = self._by_entity.get(ObjectRef(type=str(entity_type), id=entity_id))
        return self._remove_all(checks)

    def invalidate_subject(self, subject_type: str, subject_id: str) -> int:
        """Drop every entry cached for the subject, on any entity.

        Returns:
            Number of entries removed
        """
        checks = self._by_subject.get(
            SubjectRef(type=str(subject_type), id=subject_id)
        )
        return self._remove_all(checks)

    def clear(self) -> None:
        """Drop every cached entry."""
        self._invalidations += len(self._entries)
        self._entries.clear()
        self._by_entity.clear()
        self._by_subject.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self._max_size,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            invalidations=self._invalidations,
        )

    def _remove_all(self, checks: set[PermissionCheck] | None) -> int:
        if not checks:
            return 0
        removed = 0
        for check in list(checks):
            if self._remove(check):
                removed += 1
        self._invalidations += removed
        return removed

    def _make_room(self) -> None:
        """Free one slot, dropping expired entries at the LRU end first.

        The walk stops at the first fresh entry, so an insert into a full
        cache of fresh entries inspects one entry. Expired entries further
        along are dropped lazily on lookup or when they reach the LRU end.
        """
        now = self._clock()
        while self._entries:
            oldest, entry = next(iter(self._entries.items()))
            if not entry.is_expired(now):
                break
            self._remove(oldest)
            self._evictions += 1

        while len(self._entries) >= self._max_size:
            oldest = next(iter(self._entries))
            self._remove(oldest)
            self._evictions += 1

    def _remove(self, check: PermissionCheck) -> bool:
        if self._entries.pop(check, None) is None:
            return False
        _discard(self._by_entity, check.entity, check)
        _discard(self._by_subject, check.subject, check)
        return True


def _discard(index: dict, key: object, check: PermissionCheck) -> None:
    bucket = index.get(key)
    if bucket is None:
        return
    bucket.discard(check)
    if not bucket:
        del index[key]
