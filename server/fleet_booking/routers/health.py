"""Health, readiness and service information endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.dependencies import DatabaseSession
from ..core.observability import SERVICE_NAME, SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the service is healthy and responsive",
)
async def health_check() -> HealthResponse:
    response_data = HealthResponse(
        status=HealthStatus.HEALTHY,
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc),
    )

    logger.debug("Health check requested", extra={"status": response_data.status.value})
    return response_data


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness Check",
    description="Check that the database answers and the dispatcher is running",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(request: Request, db: AsyncSession = DatabaseSession) -> JSONResponse:
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.warning("Readiness database check failed", extra={"error": str(e)})
        checks["database"] = "unavailable"

    dispatcher = getattr(request.app.state, "vehicle_status_dispatcher", None)
    checks["vehicle_status_dispatcher"] = (
        "ok" if dispatcher is not None and dispatcher.is_running else "stopped"
    )

    ready = checks["database"] == "ok"
    response_data = ReadinessResponse(
        status=HealthStatus.READY if ready else HealthStatus.DEGRADED,
        service=SERVICE_NAME,
        checks=checks,
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response_data.model_dump(mode="json"),
    )


@router.get(
    "/info",
    summary="Service Information",
    description="Get detailed information about the service",
    response_model=dict,
    tags=["Info"],
)
async def service_info() -> dict:
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "description": "Booking lifecycle service of the fleet rental platform",
        "environment": settings.environment,
        "debug": settings.debug,
        "collaborators": {
            "user_service": settings.user_service_url,
            "vehicle_service": settings.vehicle_service_url,
            "stub_adapters": settings.use_stub_adapters,
        },
        "endpoints": {
            "health": "/health",
            "readiness": "/ready",
            "metrics": "/metrics",
            "docs": "/docs" if settings.debug else None,
        },
    }
