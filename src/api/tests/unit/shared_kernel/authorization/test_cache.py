"""Unit tests for the permission cache."""

import pytest

from shared_kernel.authorization.cache import CacheEntry, PermissionCache
from shared_kernel.authorization.types import PermissionCheck


def _check(subject="u1", action="view", entity_type="site", entity_id="s1"):
    return PermissionCheck(
        subject_id=subject,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
    )


class TestConstruction:
    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError, match="ttl_seconds"):
            PermissionCache(ttl_seconds=0)

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="max_size"):
            PermissionCache(max_size=0)


class TestGetAndSet:
    def test_miss_returns_none(self, clock):
        cache = PermissionCache(clock=clock)

        assert cache.get(_check()) is None
        assert cache.stats().misses == 1

    def test_hit_returns_stored_answer(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(), True)
        cache.set(_check(action="delete"), False)

        assert cache.get(_check()) is True
        assert cache.get(_check(action="delete")) is False
        assert cache.stats().hits == 2

    def test_overwrite_replaces_answer(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(), True)
        cache.set(_check(), False)

        assert cache.get(_check()) is False
        assert len(cache) == 1


class TestExpiry:
    def test_entry_is_fresh_just_before_ttl(self, clock):
        cache = PermissionCache(ttl_seconds=300, clock=clock)
        cache.set(_check(), True)

        clock.advance(299.999)

        assert cache.get(_check()) is True

    def test_entry_expires_at_ttl(self, clock):
        """An entry whose age equals the TTL is treated as a miss."""
        cache = PermissionCache(ttl_seconds=300, clock=clock)
        cache.set(_check(), True)

        clock.advance(300)

        assert cache.get(_check()) is None
        assert len(cache) == 0

    def test_contains_respects_expiry(self, clock):
        cache = PermissionCache(ttl_seconds=10, clock=clock)
        cache.set(_check(), True)
        assert _check() in cache

        clock.advance(10)

        assert _check() not in cache


class TestEviction:
    def test_least_recently_used_entry_is_evicted(self, clock):
        cache = PermissionCache(max_size=2, clock=clock)
        cache.set(_check(entity_id="s1"), True)
        cache.set(_check(entity_id="s2"), True)

        # Touch s1 so s2 becomes least recently used
        cache.get(_check(entity_id="s1"))
        cache.set(_check(entity_id="s3"), True)

        assert cache.get(_check(entity_id="s1")) is True
        assert cache.get(_check(entity_id="s2")) is None
        assert cache.get(_check(entity_id="s3")) is True
        assert cache.stats().evictions == 1

    def test_expired_entries_are_purged_before_lru(self, clock):
        cache = PermissionCache(ttl_seconds=10, max_size=2, clock=clock)
        cache.set(_check(entity_id="old"), True)
        clock.advance(5)
        cache.set(_check(entity_id="recent"), True)
        clock.advance(6)

        cache.set(_check(entity_id="new"), True)

        assert len(cache) == 2
        assert cache.get(_check(entity_id="recent")) is True
        assert cache.get(_check(entity_id="new")) is True

    def test_full_cache_of_fresh_entries_inspects_only_the_lru_end(
        self, clock, monkeypatch
    ):
        cache = PermissionCache(max_size=100, clock=clock)
        for i in range(100):
            cache.set(_check(entity_id=f"s{i}"), True)

        inspected = []
        original = CacheEntry.is_expired

        def counting_is_expired(entry, now):
            inspected.append(entry)
            return original(entry, now)

        monkeypatch.setattr(CacheEntry, "is_expired", counting_is_expired)

        cache.set(_check(entity_id="s100"), True)

        assert len(inspected) == 1
        assert len(cache) == 100
        assert cache.get(_check(entity_id="s0")) is None

    def test_size_never_exceeds_max(self, clock):
        cache = PermissionCache(max_size=3, clock=clock)
        for i in range(10):
            cache.set(_check(entity_id=f"s{i}"), True)

        assert len(cache) == 3
        assert cache.stats().size == 3


class TestInvalidation:
    def test_invalidate_entity_drops_all_subjects_and_actions(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(subject="u1", action="view"), True)
        cache.set(_check(subject="u2", action="manage"), False)
        cache.set(_check(entity_id="s2"), True)

        removed = cache.invalidate_entity("site", "s1")

        assert removed == 2
        assert cache.get(_check(subject="u1", action="view")) is None
        assert cache.get(_check(subject="u2", action="manage")) is None
        assert cache.get(_check(entity_id="s2")) is True

    def test_invalidate_unknown_entity_is_noop(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(), True)

        assert cache.invalidate_entity("tenant", "missing") == 0
        assert len(cache) == 1

    def test_invalidate_subject_drops_entries_on_every_entity(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(subject="u1", entity_type="site", entity_id="s1"), True)
        cache.set(_check(subject="u1", entity_type="tenant", entity_id="t1"), True)
        cache.set(_check(subject="u2", entity_type="site", entity_id="s1"), True)

        removed = cache.invalidate_subject("user", "u1")

        assert removed == 2
        assert len(cache) == 1
        assert cache.get(_check(subject="u2")) is True

    def test_indexes_are_cleaned_after_eviction(self, clock):
        """An evicted entry must not be counted by a later invalidation."""
        cache = PermissionCache(max_size=1, clock=clock)
        cache.set(_check(entity_id="s1"), True)
        cache.set(_check(entity_id="s2"), True)

        assert cache.invalidate_entity("site", "s1") == 0

    def test_clear_empties_cache(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(entity_id="s1"), True)
        cache.set(_check(entity_id="s2"), True)

        cache.clear()

        assert len(cache) == 0
        assert cache.stats().invalidations == 2


class TestStats:
    def test_hit_rate(self, clock):
        cache = PermissionCache(clock=clock)
        cache.set(_check(), True)
        cache.get(_check())
        cache.get(_check())
        cache.get(_check(entity_id="other"))

        stats = cache.stats()

        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.hit_rate == pytest.approx(2 / 3)

    def test_hit_rate_without_lookups_is_zero(self, clock):
        assert PermissionCache(clock=clock).stats().hit_rate == 0.0
