"""Health check endpoint using HealthCheckService."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
import structlog

from monitoring_exporter.monitoring.health_check import HealthCheckService, HealthStatus

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_health_service(request: Request) -> HealthCheckService:
    """Health service built by the application factory."""
    return request.app.state.health_service


@router.get("/health")
async def health_check(
    health_service: HealthCheckService = Depends(get_health_service)
):
    """
    Health check endpoint.

    Returns 200 if the exporter can serve scrapes (healthy or degraded),
    503 if any component is unhealthy.

    Response format:
    {
        "status": "healthy" | "unhealthy" | "degraded",
        "check_time": "2025-11-25T08:00:00Z",
        "components": {
            "secret_store": {"service": "secret_store", "status": "healthy", "details": {...}},
            "producers": {"service": "producers", "status": "healthy", "details": {...}}
        }
    }
    """
    logger.info("health_check_requested")

    health_result = health_service.check_all()

    response_data = {
        "status": health_result["status"],
        "check_time": datetime.utcnow().isoformat() + "Z",
        "components": health_result["components"],
    }

    # Map health status to HTTP status code
    if health_result["status"] == HealthStatus.UNHEALTHY:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_200_OK

    logger.info(
        "health_check_completed",
        overall_status=health_result["status"],
        status_code=status_code,
    )

    return JSONResponse(status_code=status_code, content=response_data)
