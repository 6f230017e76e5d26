"""
Error Handler Middleware

Correlation IDs for every request, check-in exceptions mapped to
HTTP responses, and sanitized 500s for anything unhandled.

Status mapping:
    ValidationError        422
    InvalidTransitionError 409
    SafetyHalt             409 (decision + crisis resources in body)
    CaptureError           400
    SessionNotFoundError   404
    TransportError         502
    PersistenceError       503
"""

import traceback
from uuid import UUID, uuid4

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from aura.config.logging_config import bind_correlation_id, clear_context, get_logger
from aura.domain.exceptions import (
    CaptureError,
    CheckInError,
    InvalidTransitionError,
    PersistenceError,
    SafetyHalt,
    SessionNotFoundError,
    TransportError,
    ValidationError,
)
from aura.infrastructure.metrics.prometheus_metrics import HTTP_REQUESTS_TOTAL
from aura.services.safety.crisis_resources import DEFAULT_RESOURCES

logger = get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global request middleware.

    Provides:
    - Correlation ID tracking for all requests
    - Request counting by status code
    - Sanitized responses for unhandled errors
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
        bind_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            HTTP_REQUESTS_TOTAL.labels(method=request.method, status_code=str(response.status_code)).inc()
            return response

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                error_message=str(e),
                traceback=traceback.format_exc(),
            )
            HTTP_REQUESTS_TOTAL.labels(method=request.method, status_code="500").inc()
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "correlation_id": correlation_id,
                    "message": "An unexpected error occurred. Please try again.",
                },
                headers={"X-Correlation-ID": correlation_id},
            )

        finally:
            clear_context()


def _error(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra},
    )


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(422, "validation_error", str(exc), field=exc.field)


async def _invalid_transition(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return _error(409, "invalid_transition", str(exc), current=exc.current, requested=exc.requested)


async def _safety_halt(request: Request, exc: SafetyHalt) -> JSONResponse:
    resources = [r.to_dict() for r in DEFAULT_RESOURCES]
    container = getattr(request.app.state, "container", None)
    session_id = request.path_params.get("session_id")
    if container is not None and session_id is not None:
        try:
            session = container.pipeline.get_session(UUID(str(session_id)))
            resources = [r.to_dict() for r in container.crisis_resources.get(session.user_id)]
        except (CheckInError, ValueError):
            # Unknown session: keep the national defaults
            pass

    logger.warning("Check-in halted", severity=exc.decision.severity, path=request.url.path)
    return _error(
        409,
        "safety_halt",
        str(exc),
        decision=exc.decision.to_dict(),
        resources=resources,
    )


async def _capture_error(request: Request, exc: CaptureError) -> JSONResponse:
    return _error(400, "capture_error", str(exc))


async def _not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
    return _error(404, "not_found", str(exc))


async def _transport_error(request: Request, exc: TransportError) -> JSONResponse:
    # Provider details stay in the logs
    return _error(502, "upstream_error", "An external service is unavailable. Please try again.")


async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    return _error(503, "persistence_error", "We couldn't save your check-in. Please try again.")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach check-in exception handlers to the application."""
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(SafetyHalt, _safety_halt)
    app.add_exception_handler(CaptureError, _capture_error)
    app.add_exception_handler(SessionNotFoundError, _not_found)
    app.add_exception_handler(TransportError, _transport_error)
    app.add_exception_handler(PersistenceError, _persistence_error)
