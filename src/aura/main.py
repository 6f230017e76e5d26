"""
Aura FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling middleware and exception mapping
- Router registration
- Metrics endpoint

This is the production entry point for the Aura check-in backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aura import __version__
from aura.api.dependencies import AppContainer, build_container
from aura.api.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from aura.api.v1.router import api_router
from aura.config import Settings, get_settings
from aura.config.logging_config import configure_logging, get_logger
from aura.infrastructure.metrics.prometheus_metrics import metrics_router, update_system_info
from aura.infrastructure.monitoring.sentry_integration import init_sentry

logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    container: Optional[AppContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings (defaults to environment)
        container: Pre-built service container (tests inject fakes here)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        Starts the database when configured and cancels every
        background poller on shutdown.
        """
        logger.info("Starting Aura application", env=settings.env, version=__version__)

        init_sentry(
            dsn=settings.sentry.dsn.get_secret_value(),
            environment=settings.env,
            traces_sample_rate=settings.sentry.traces_sample_rate,
        )
        update_system_info(settings.env, __version__)

        app.state.container = container or build_container(settings)
        db = app.state.container.db
        try:
            if db is not None:
                await db.initialize()
                logger.info("Database connection initialized")

            yield

        finally:
            logger.info("Shutting down Aura application")
            await app.state.container.registry.cancel_all()
            if db is not None:
                await db.close()
            logger.info("Aura application shutdown complete")

    app = FastAPI(
        title="Aura Check-in API",
        description="Voice check-ins with therapeutic responses - Backend API",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=f"/api/{settings.api_version}")
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "Aura Check-in API",
            "version": __version__,
            "status": "operational",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "aura.main:create_application",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().env == "development",
        log_level=get_settings().log_level.lower(),
    )
