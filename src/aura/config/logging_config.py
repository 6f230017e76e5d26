"""
Aura Logging Configuration

Structured logging via structlog:
- JSON output outside development, colored console in development
- Correlation and check-in session IDs bound through contextvars
- Secrets redacted by key name
- Journal content (transcripts, responses, audio) never written verbatim

PRIVACY: Check-in transcripts are sensitive health data. Log their
length, never their text.
"""

import logging
import sys
from typing import Any

import structlog

from aura import __version__
from aura.config.settings import Settings


# Keys whose values are replaced outright
SECRET_KEY_PATTERNS: frozenset[str] = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "dsn",
    "credential",
})

# Keys whose values are replaced by a length summary
CONTENT_KEYS: frozenset[str] = frozenset({
    "transcript",
    "response_text",
    "script",
    "audio",
    "context_snippet",
})


def _summarize(value: Any) -> str:
    try:
        return f"[{len(value)} chars]"
    except TypeError:
        return "[REDACTED]"


def _scrub_event(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Redact secrets and journal content from a log event.

    Nested dicts are scrubbed recursively; list items inherit
    the parent key's treatment.
    """
    def scrub(key: str, value: Any) -> Any:
        key_lower = key.lower()
        if any(pattern in key_lower for pattern in SECRET_KEY_PATTERNS):
            return "[REDACTED]"
        if key_lower in CONTENT_KEYS and value is not None:
            return _summarize(value)
        if isinstance(value, dict):
            return {k: scrub(k, v) for k, v in value.items()}
        if isinstance(value, list):
            return [scrub(key, item) for item in value]
        return value

    return {key: scrub(key, value) for key, value in event_dict.items()}


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("service", "aura-backend")
    event_dict.setdefault("version", __version__)
    return event_dict


def get_processors(is_development: bool) -> list[Any]:
    """
    Build the structlog processor chain.

    Args:
        is_development: Whether to render for humans instead of machines

    Returns:
        Ordered list of processors
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _scrub_event,
        _add_service_context,
    ]

    if is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])

    return processors


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging.

    Call once during application startup.

    Args:
        settings: Application settings
    """
    is_development = settings.env == "development"
    log_level = getattr(logging, settings.log_level.upper())

    structlog.configure(
        processors=get_processors(is_development),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Provider SDKs log request bodies at DEBUG
    for noisy in ("uvicorn.access", "httpx", "httpcore", "openai", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)
    """
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Bind a request correlation ID to the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def bind_check_in_context(session_id: str, user_id: str) -> None:
    """
    Bind check-in identifiers to the current context.

    Background tasks copy the context at spawn time, so video
    pollers keep logging with the session that started them.
    """
    structlog.contextvars.bind_contextvars(session_id=session_id, user_id=user_id)


def clear_context() -> None:
    """Clear all context variables (call at end of request)."""
    structlog.contextvars.clear_contextvars()
