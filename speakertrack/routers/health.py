"""
Health check endpoints for the speaker tracking service.
"""

from fastapi import APIRouter, Request

from speakertrack.config import get_settings
from speakertrack.schemas.responses import HealthResponse, ReadinessResponse

router = APIRouter()

VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the service is running.
    """
    return HealthResponse(
        status="healthy",
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    The tracker has no models to load, so the service is ready once the
    application has started.
    """
    semaphore = getattr(request.app.state, "job_semaphore", None)
    return ReadinessResponse(
        ready=semaphore is not None,
        max_concurrent_jobs=get_settings().max_concurrent_jobs,
    )
