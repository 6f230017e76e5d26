"""Metrics infrastructure package."""

from aura.infrastructure.metrics.prometheus_metrics import (
    ACTIVE_VIDEO_POLLS,
    CHECK_INS_TOTAL,
    CRISIS_DECISIONS_TOTAL,
    CRISIS_FLAGS_TOTAL,
    DASHBOARD_CACHE_TOTAL,
    HTTP_REQUESTS_TOTAL,
    RESPONSE_SOURCE_TOTAL,
    SPEECH_SYNTHESIS_TOTAL,
    STAGE_DURATION,
    TRANSCRIPTIONS_TOTAL,
    VIDEO_JOBS_TOTAL,
    metrics_router,
    track_stage,
    update_system_info,
)

__all__ = [
    "ACTIVE_VIDEO_POLLS",
    "CHECK_INS_TOTAL",
    "CRISIS_DECISIONS_TOTAL",
    "CRISIS_FLAGS_TOTAL",
    "DASHBOARD_CACHE_TOTAL",
    "HTTP_REQUESTS_TOTAL",
    "RESPONSE_SOURCE_TOTAL",
    "SPEECH_SYNTHESIS_TOTAL",
    "STAGE_DURATION",
    "TRANSCRIPTIONS_TOTAL",
    "VIDEO_JOBS_TOTAL",
    "metrics_router",
    "track_stage",
    "update_system_info",
]
