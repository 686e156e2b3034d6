"""
Tests for fm_dispatch/dispatch/cache.py.

What we test
------------
RecommendationCache:
  - Stores and returns values until the TTL expires.
  - Keys on (organization_id, work_order_id).
  - ttl_seconds=0 stores nothing.
  - invalidate() drops a work order across organizations, or for one.

CachedDispatchEngine:
  - Second call is served from cache without touching the provider.
  - Errors are not cached.
  - Disabled cache config always recomputes.
"""

from __future__ import annotations

import asyncio

import pytest

from fm_dispatch.config import CacheConfig
from fm_dispatch.dispatch.cache import CachedDispatchEngine, RecommendationCache
from fm_dispatch.dispatch.engine import DispatchEngine
from fm_dispatch.errors import WorkOrderNotFoundError
from fm_dispatch.models.recommendation import (
    DispatchRecommendation,
    RecommendedAssignment,
)
from fm_dispatch.snapshot.memory import InMemorySnapshotProvider


# ── Helpers ────────────────────────────────────────────────────────────────────

class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _rec(work_order_id: int = 42) -> DispatchRecommendation:
    return DispatchRecommendation(
        work_order_id=work_order_id,
        technicians=[],
        vendors=[],
        recommended_assignment=RecommendedAssignment(
            type="technician", id=1, confidence_score=0.8, reasoning="Available technician",
        ),
    )


class _CountingProvider(InMemorySnapshotProvider):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.work_order_reads = 0

    async def get_work_order_details(self, work_order_id, organization_id):
        self.work_order_reads += 1
        return await super().get_work_order_details(work_order_id, organization_id)


# ── RecommendationCache ───────────────────────────────────────────────────────

class TestRecommendationCache:
    def test_hit_before_expiry(self):
        clock = _Clock()
        cache = RecommendationCache(ttl_seconds=60, clock=clock)
        rec = _rec()
        cache.set(1, rec)

        clock.now += 59
        assert cache.get(1, 42) is rec

    def test_miss_after_expiry(self):
        clock = _Clock()
        cache = RecommendationCache(ttl_seconds=60, clock=clock)
        cache.set(1, _rec())

        clock.now += 60
        assert cache.get(1, 42) is None
        assert len(cache) == 0

    def test_keyed_by_organization(self):
        cache = RecommendationCache(ttl_seconds=60)
        cache.set(1, _rec())
        assert cache.get(2, 42) is None

    def test_zero_ttl_stores_nothing(self):
        cache = RecommendationCache(ttl_seconds=0)
        cache.set(1, _rec())
        assert len(cache) == 0

    def test_invalidate_all_organizations(self):
        cache = RecommendationCache(ttl_seconds=60)
        cache.set(1, _rec(42))
        cache.set(2, _rec(42))
        cache.set(1, _rec(43))

        assert cache.invalidate(42) == 2
        assert cache.get(1, 43) is not None

    def test_invalidate_one_organization(self):
        cache = RecommendationCache(ttl_seconds=60)
        cache.set(1, _rec(42))
        cache.set(2, _rec(42))

        assert cache.invalidate(42, organization_id=2) == 1
        assert cache.get(1, 42) is not None


# ── CachedDispatchEngine ──────────────────────────────────────────────────────

class TestCachedDispatchEngine:
    def test_second_call_served_from_cache(self, sample_work_order, make_technician):
        provider = _CountingProvider(
            work_orders=[sample_work_order], technicians={1: [make_technician(1)]}
        )
        cached = CachedDispatchEngine.from_config(DispatchEngine(provider), CacheConfig())

        first = asyncio.run(cached.recommend(42, 1))
        second = asyncio.run(cached.recommend(42, 1))

        assert second is first
        assert provider.work_order_reads == 1

    def test_invalidate_forces_recompute(self, sample_work_order, make_technician):
        provider = _CountingProvider(
            work_orders=[sample_work_order], technicians={1: [make_technician(1)]}
        )
        cached = CachedDispatchEngine.from_config(DispatchEngine(provider), CacheConfig())

        asyncio.run(cached.recommend(42, 1))
        cached.invalidate(42)
        asyncio.run(cached.recommend(42, 1))

        assert provider.work_order_reads == 2

    def test_errors_not_cached(self):
        provider = _CountingProvider()
        cached = CachedDispatchEngine.from_config(DispatchEngine(provider), CacheConfig())

        for _ in range(2):
            with pytest.raises(WorkOrderNotFoundError):
                asyncio.run(cached.recommend(42, 1))

        assert provider.work_order_reads == 2
        assert len(cached.cache) == 0

    def test_disabled_cache_always_recomputes(self, sample_work_order, make_technician):
        provider = _CountingProvider(
            work_orders=[sample_work_order], technicians={1: [make_technician(1)]}
        )
        cached = CachedDispatchEngine.from_config(
            DispatchEngine(provider), CacheConfig(enabled=False)
        )

        asyncio.run(cached.recommend(42, 1))
        asyncio.run(cached.recommend(42, 1))

        assert provider.work_order_reads == 2
