"""Monitoring infrastructure package."""

from aura.infrastructure.monitoring.sentry_integration import (
    capture_exception_with_context,
    capture_safety_event,
    init_sentry,
)

__all__ = [
    "init_sentry",
    "capture_safety_event",
    "capture_exception_with_context",
]
