"""
Analytics Cache

Per-user TTL cache of dashboard aggregates with lazy recomputation.

Write path: the entry store calls invalidate_user_cache synchronously
on every create/delete, dropping all of that user's keys before the
write returns. Nothing is recomputed on write.

Reads that race an invalidation are guarded by a per-user generation
counter: a value computed before the invalidation is returned to its
caller once but never stored.
"""

import time
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from aura.config.logging_config import get_logger
from aura.config.settings import AnalyticsSettings
from aura.domain.models.dashboard import DashboardAggregate, RecentEntry
from aura.domain.models.entry import utc_now
from aura.infrastructure.database.repositories.entry_store import EntryStore
from aura.infrastructure.metrics.prometheus_metrics import DASHBOARD_CACHE_TOTAL, track_stage
from aura.services.analytics.streaks import (
    average_mood_score,
    calendar_day,
    compute_streak,
    dominant_mood,
    mood_trends,
    trend_direction,
)

logger = get_logger(__name__)

DASHBOARD_KEY = "dashboard"


@dataclass(frozen=True)
class _CacheItem:
    value: Any
    expires_at: float


class AnalyticsCache:
    """
    Dashboard analytics with TTL caching.

    Usage:
        cache = AnalyticsCache(entry_store, settings.analytics)
        aggregate = await cache.get_dashboard_data(user_id)
    """

    def __init__(
        self,
        entry_store: EntryStore,
        settings: Optional[AnalyticsSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utc_now,
        register: bool = True,
    ) -> None:
        """
        Args:
            entry_store: Source of raw entries
            settings: TTL, timezone, and recent entry count
            clock: Monotonic seconds used for expiry
            now: Current UTC time used for calendar math
            register: Subscribe to entry store writes for invalidation
        """
        settings = settings or AnalyticsSettings()
        self._store = entry_store
        self._ttl = settings.cache_ttl_seconds
        self._tz: tzinfo = ZoneInfo(settings.timezone)
        self._recent_limit = settings.recent_entries_limit
        self._clock = clock
        self._now = now
        self._items: dict[tuple[str, str], _CacheItem] = {}
        self._generations: dict[str, int] = {}

        if register:
            entry_store.add_write_listener(self.invalidate_user_cache)

    @property
    def size(self) -> int:
        return len(self._items)

    def invalidate_user_cache(self, user_id: UUID) -> int:
        """
        Drop every cache key scoped to user_id.

        Returns:
            Number of keys removed
        """
        uid = str(user_id)
        self._generations[uid] = self._generations.get(uid, 0) + 1
        stale = [key for key in self._items if key[0] == uid]
        for key in stale:
            del self._items[key]
        if stale:
            logger.debug("Analytics cache invalidated", user_id=uid, keys=len(stale))
        return len(stale)

    def _get(self, key: tuple[str, str]) -> Optional[Any]:
        item = self._items.get(key)
        if item is None:
            return None
        if self._clock() >= item.expires_at:
            del self._items[key]
            return None
        return item.value

    async def get_dashboard_data(self, user_id: UUID) -> DashboardAggregate:
        """
        Cached dashboard aggregate for a user.

        Raises:
            PersistenceError: If the entry store cannot be read
        """
        uid = str(user_id)
        key = (uid, DASHBOARD_KEY)

        cached = self._get(key)
        if cached is not None:
            DASHBOARD_CACHE_TOTAL.labels(result="hit").inc()
            return cached

        DASHBOARD_CACHE_TOTAL.labels(result="miss").inc()
        generation = self._generations.get(uid, 0)
        with track_stage("analytics"):
            aggregate = await self._compute(user_id)

        if self._generations.get(uid, 0) == generation:
            self._items[key] = _CacheItem(value=aggregate, expires_at=self._clock() + self._ttl)
        else:
            logger.debug("Analytics recompute raced an invalidation, not caching", user_id=uid)
        return aggregate

    async def _compute(self, user_id: UUID) -> DashboardAggregate:
        entries = await self._store.query(user_id)
        now = self._now()
        today = now.astimezone(self._tz).date()

        return DashboardAggregate(
            user_id=user_id,
            mood_trends=mood_trends(entries, today, self._tz),
            streak=compute_streak(entries, today, self._tz),
            dominant_mood=dominant_mood(e.mood_tag for e in entries),
            average_mood_score=average_mood_score(entries),
            trend=trend_direction(entries),
            total_entries=len(entries),
            active_days=len({calendar_day(e, self._tz) for e in entries}),
            computed_at=now,
            recent_entries=tuple(
                RecentEntry(
                    id=e.id,
                    mood_tag=e.mood_tag,
                    text_summary=e.text_summary,
                    has_video=e.video_ref is not None,
                    created_at=e.created_at,
                )
                for e in entries[: self._recent_limit]
            ),
        )
