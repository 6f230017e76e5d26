"""
Prometheus Metrics

Check-in pipeline observability, exposed at /metrics.

Metrics only increment or observe; they never block or raise
into the pipeline.
"""

import time
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

# =============================================================================
# CHECK-IN METRICS
# =============================================================================

CHECK_INS_TOTAL = Counter(
    "aura_check_ins_total",
    "Check-in generation outcomes",
    ["outcome"],  # completed, halted, validation_failed, persistence_failed
)

RESPONSE_SOURCE_TOTAL = Counter(
    "aura_response_source_total",
    "Final response source",
    ["source"],  # ai, hybrid, template
)

STAGE_DURATION = Histogram(
    "aura_stage_duration_seconds",
    "Pipeline stage latency",
    ["stage"],  # transcription, orchestration, synthesis, persistence
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

TRANSCRIPTIONS_TOTAL = Counter(
    "aura_transcriptions_total",
    "Transcriptions by mode and status",
    ["mode", "status"],  # provider/stub, success/error
)

SPEECH_SYNTHESIS_TOTAL = Counter(
    "aura_speech_synthesis_total",
    "Speech synthesis attempts",
    ["status"],  # success, skipped, failed
)

# =============================================================================
# SAFETY METRICS
# =============================================================================

CRISIS_DECISIONS_TOTAL = Counter(
    "aura_crisis_decisions_total",
    "Crisis gate decisions by action",
    ["action"],  # none, resources, interstitial, halt
)

CRISIS_FLAGS_TOTAL = Counter(
    "aura_crisis_flags_total",
    "Crisis flag writes",
    ["status"],  # recorded, failed
)

# =============================================================================
# VIDEO METRICS
# =============================================================================

VIDEO_JOBS_TOTAL = Counter(
    "aura_video_jobs_total",
    "Video job outcomes",
    ["outcome"],  # patched, failed, exhausted, submit_failed, cancelled
)

ACTIVE_VIDEO_POLLS = Gauge(
    "aura_active_video_polls",
    "Video status pollers currently running",
)

# =============================================================================
# ANALYTICS METRICS
# =============================================================================

DASHBOARD_CACHE_TOTAL = Counter(
    "aura_dashboard_cache_total",
    "Dashboard cache lookups",
    ["result"],  # hit, miss
)

# =============================================================================
# API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "aura_http_requests_total",
    "Total HTTP requests",
    ["method", "status_code"],
)

SYSTEM_INFO = Info(
    "aura_system",
    "Aura system information",
)


@contextmanager
def track_stage(stage: str) -> Iterator[None]:
    """Observe the wall-clock duration of a pipeline stage."""
    start = time.perf_counter()
    try:
        yield
    finally:
        STAGE_DURATION.labels(stage=stage).observe(time.perf_counter() - start)


def update_system_info(environment: str, version: str) -> None:
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
