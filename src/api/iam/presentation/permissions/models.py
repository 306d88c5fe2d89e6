"""Pydantic models for permission status responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shared_kernel.authorization.cache import CacheStats


class PermissionStatusResponse(BaseModel):
    """Which of the requested permissions the caller holds on one entity.

    A permission whose check failed is reported as not held.
    """

    entity_type: str = Field(..., description="Entity type (e.g., tenant)")
    entity_id: str = Field(..., description="Entity identifier")
    permissions: dict[str, bool] = Field(
        ..., description="Requested permission name to whether it is held"
    )


class CacheStatsResponse(BaseModel):
    """Response model for permission cache statistics."""

    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int
    invalidations: int
    hit_rate: float

    @classmethod
    def from_stats(cls, stats: CacheStats) -> CacheStatsResponse:
        return cls(
            size=stats.size,
            max_size=stats.max_size,
            hits=stats.hits,
            misses=stats.misses,
            evictions=stats.evictions,
            invalidations=stats.invalidations,
            hit_rate=stats.hit_rate,
        )
