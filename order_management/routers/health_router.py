"""
Health check and monitoring router.

Provides liveness and readiness probes.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import settings
from ..dependencies import get_dataverse_connection
from ..domain.entities import utc_now
from ..infrastructure.dataverse_connection import DataverseConnection

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = settings.SERVICE_NAME
    version: str = settings.SERVICE_VERSION


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(status="healthy", timestamp=utc_now().isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the Dataverse connection is established",
    responses={503: {"description": "Dataverse not connected"}},
)
async def readiness_check(
    connection: DataverseConnection = Depends(get_dataverse_connection),
):
    """
    Readiness check.

    Returns 200 if the Dataverse connection is established, 503 otherwise.
    """
    checks = {"dataverse": "healthy" if connection.is_connected else "unavailable"}
    response = ReadinessResponse(
        ready=connection.is_connected, checks=checks, timestamp=utc_now().isoformat()
    )

    if not response.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
