"""TTL cache for computed metrics snapshots, keyed by user and date range."""

import logging
import time
from collections.abc import Callable
from datetime import datetime

from journal.schemas.metrics import PerformanceMetrics

logger = logging.getLogger(__name__)

# (user_id, start ISO or None, end ISO or None)
CacheKey = tuple[str, str | None, str | None]


def cache_key(
    user_id: str,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> CacheKey:
    """Both bounds are keyed separately; a half-open range never shares the all-time entry."""
    return (
        user_id,
        start_date.isoformat() if start_date is not None else None,
        end_date.isoformat() if end_date is not None else None,
    )


class MetricsCache:
    """Key -> (metrics, stored_at) map with a configurable TTL and clock."""

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[PerformanceMetrics, float]] = {}

    def get(self, key: CacheKey) -> PerformanceMetrics | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        metrics, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return metrics

    def set(self, key: CacheKey, metrics: PerformanceMetrics):
        self._entries[key] = (metrics, self._clock())

    def invalidate(self, user_id: str) -> int:
        """Drop every entry for a user. Returns how many were removed."""
        stale = [k for k in self._entries if k[0] == user_id]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached metrics for user {user_id}")
        return len(stale)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
