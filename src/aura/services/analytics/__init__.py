"""Dashboard analytics package."""

from aura.services.analytics.analytics_cache import AnalyticsCache
from aura.services.analytics.streaks import (
    MOOD_SCORES,
    compute_streak,
    mood_score,
    mood_trends,
    trend_direction,
)

__all__ = [
    "AnalyticsCache",
    "MOOD_SCORES",
    "compute_streak",
    "mood_score",
    "mood_trends",
    "trend_direction",
]
