"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its dependencies.
"""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from rest_api.core.dependencies import get_registry
from shared.config.settings import settings
from shared.infrastructure.db import get_db_context
from shared.infrastructure.events import PublisherRegistry


router = APIRouter(prefix="/api", tags=["health"])

DATABASE_CHECK_TIMEOUT = 3.0


@router.get("/health")
def health_check(registry: PublisherRegistry = Depends(get_registry)):
    """
    Basic health check endpoint.
    Returns service status and the number of open live order streams.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
        "live_order_subscribers": registry.subscriber_count,
    }


def _ping_database() -> None:
    with get_db_context() as db:
        db.execute(text("SELECT 1"))


@router.get("/health/detailed")
async def detailed_health_check(registry: PublisherRegistry = Depends(get_registry)):
    """
    Detailed health check that verifies database connectivity.
    Returns 503 Service Unavailable if the database is unreachable.
    """
    checks = {
        "service": "rest-api",
        "environment": settings.environment,
        "live_order_subscribers": registry.subscriber_count,
        "dependencies": {},
    }

    try:
        await asyncio.wait_for(asyncio.to_thread(_ping_database), timeout=DATABASE_CHECK_TIMEOUT)
        checks["dependencies"]["database"] = {"status": "healthy"}
    except Exception as e:
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}

    all_healthy = all(dep["status"] == "healthy" for dep in checks["dependencies"].values())
    checks["status"] = "healthy" if all_healthy else "degraded"

    if not all_healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks
