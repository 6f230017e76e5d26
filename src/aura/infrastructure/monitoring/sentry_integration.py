"""
Sentry Error Tracking Integration

Error tracking for the check-in service. Events are scrubbed of
secrets and of journal content before leaving the process.

PRIVACY: Transcripts and generated responses are health data and
must never reach Sentry verbatim.
"""

import re
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from aura import __version__
from aura.config.logging_config import get_logger

logger = get_logger(__name__)

SECRET_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password)[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"xi-api-key[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+", re.IGNORECASE),
]

SECRET_KEYS = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "x_api_key",
    "xi_api_key",
    "authorization",
    "credential",
})

# Dropped entirely rather than pattern-scrubbed
CONTENT_KEYS = frozenset({
    "transcript",
    "text_summary",
    "response_text",
    "script",
    "context_snippet",
})


def _scrub_string(value: str) -> str:
    for pattern in SECRET_PATTERNS:
        value = pattern.sub("[REDACTED]", value)
    return value


def _scrub(key: str, value: Any) -> Any:
    key_lower = key.lower().replace("-", "_")
    if any(secret in key_lower for secret in SECRET_KEYS):
        return "[REDACTED]"
    if key_lower in CONTENT_KEYS:
        return "[CONTENT]"
    if isinstance(value, dict):
        return _scrub_dict(value)
    if isinstance(value, list):
        return [_scrub(key, item) for item in value]
    if isinstance(value, str):
        return _scrub_string(value)
    return value


def _scrub_dict(data: dict) -> dict:
    """Recursively scrub secrets and journal content."""
    return {key: _scrub(str(key), value) for key, value in data.items()}


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Scrub request bodies, headers, breadcrumbs, and extras."""
    request = event.get("request")
    if request:
        if isinstance(request.get("data"), dict):
            request["data"] = _scrub_dict(request["data"])
        elif "data" in request:
            # Raw audio uploads and unparsed bodies
            request["data"] = "[BODY]"
        if isinstance(request.get("headers"), dict):
            request["headers"] = _scrub_dict(request["headers"])

    for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
        if isinstance(breadcrumb.get("data"), dict):
            breadcrumb["data"] = _scrub_dict(breadcrumb["data"])

    if "extra" in event:
        event["extra"] = _scrub_dict(event["extra"])

    return event


def init_sentry(
    dsn: str,
    environment: str = "development",
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN (empty disables tracking)
        environment: Environment name
        traces_sample_rate: Performance tracing rate

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=f"aura@{__version__}",
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            LoggingIntegration(level=None, event_level=None),
        ],
        send_default_pii=False,
        max_breadcrumbs=50,
    )

    logger.info("Sentry initialized", environment=environment)
    return True


def capture_safety_event(
    message: str,
    severity: int,
    session_id: Optional[str] = None,
) -> None:
    """
    Record a crisis gate halt for monitoring.

    Only the severity and identifiers are attached, never the transcript.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("category", "safety")
        scope.set_extra("severity", severity)
        if session_id:
            scope.set_tag("session_id", session_id)
        sentry_sdk.capture_message(message, level="warning")


def capture_exception_with_context(
    exception: BaseException,
    task_name: Optional[str] = None,
    extra: Optional[dict] = None,
) -> Optional[str]:
    """
    Capture an exception with scrubbed context.

    Returns:
        Sentry event ID, or None when Sentry is disabled
    """
    with sentry_sdk.new_scope() as scope:
        if task_name:
            scope.set_tag("task", task_name)
        if extra:
            for key, value in _scrub_dict(extra).items():
                scope.set_extra(key, value)
        return sentry_sdk.capture_exception(exception)
