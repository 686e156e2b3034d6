"""
Time-boxed response cache around the dispatch engine.

The engine is a pure function of its snapshot; caching is applied outside
it.  ``RecommendationCache`` stores whole ``DispatchRecommendation`` values,
keyed by ``(organization_id, work_order_id)``, for ``ttl_seconds``.
Failures (not found, no candidates) are never cached.

Invalidate a work order after anything that changes its candidates or the
work order itself (assignment, status change, new feedback).
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from fm_dispatch.config import CacheConfig
from fm_dispatch.dispatch.engine import DispatchEngine
from fm_dispatch.models.recommendation import DispatchRecommendation

logger = logging.getLogger(__name__)

CacheKey = tuple[int, int]


class RecommendationCache:
    """In-process TTL cache for dispatch recommendations.

    Args:
        ttl_seconds: Entry lifetime; 0 disables storage.
        clock:       Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, DispatchRecommendation]] = {}

    def get(self, organization_id: int, work_order_id: int) -> Optional[DispatchRecommendation]:
        key = (organization_id, work_order_id)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, organization_id: int, value: DispatchRecommendation) -> None:
        if self.ttl_seconds <= 0:
            return
        key = (organization_id, value.work_order_id)
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self, work_order_id: int, organization_id: Optional[int] = None) -> int:
        """Drop cached entries for a work order.

        Args:
            work_order_id:   Work order to drop.
            organization_id: Restrict to one organization; ``None`` = all.

        Returns:
            Number of entries removed.
        """
        keys = [
            k for k in self._entries
            if k[1] == work_order_id and (organization_id is None or k[0] == organization_id)
        ]
        for k in keys:
            del self._entries[k]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CachedDispatchEngine:
    """``DispatchEngine`` wrapper that consults a ``RecommendationCache`` first."""

    def __init__(self, engine: DispatchEngine, cache: RecommendationCache) -> None:
        self.engine = engine
        self.cache = cache

    @classmethod
    def from_config(cls, engine: DispatchEngine, config: CacheConfig) -> "CachedDispatchEngine":
        ttl = config.ttl_seconds if config.enabled else 0
        return cls(engine, RecommendationCache(ttl_seconds=ttl))

    async def recommend(self, work_order_id: int, organization_id: int) -> DispatchRecommendation:
        cached = self.cache.get(organization_id, work_order_id)
        if cached is not None:
            logger.debug("Cache hit: org=%d wo=%d", organization_id, work_order_id)
            return cached

        result = await self.engine.recommend(work_order_id, organization_id)
        self.cache.set(organization_id, result)
        return result

    def invalidate(self, work_order_id: int, organization_id: Optional[int] = None) -> int:
        return self.cache.invalidate(work_order_id, organization_id)
