"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine
from shared.infrastructure.events import PublisherRegistry
from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from rest_api.models import Base


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Initialize logging
    setup_logging()

    # Validate configuration before startup
    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with unsafe configuration."
            )
        else:
            logger.warning("Running with development defaults")

    # Startup
    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    # One registry per process, shared by the stream endpoint and all producers
    app.state.publisher_registry = PublisherRegistry()
    logger.info("Live orders publisher registry ready")

    yield

    # Shutdown
    logger.info("Shutting down REST API")

    # Ends open live order streams so the server isn't held by idle dashboards
    app.state.publisher_registry.close_all()
