"""API routes for health and system info."""

from typing import Annotated

from fastapi import APIRouter, Depends

from medtech_api.config import Settings
from medtech_api.deps import get_app_settings, get_services
from medtech_api.schemas import HealthResponse
from medtech_api.services.container import ServiceContainer

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        record_store_configured=services.is_configured("record_store"),
        model_client_configured=services.is_configured("model_client"),
        mailer_configured=services.is_configured("mailer"),
    )


@router.get("/ready")
async def readiness_check(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> dict:
    """Kubernetes readiness probe."""
    if not services.is_configured("record_store"):
        return {"status": "not_ready", "reason": "record_store_not_configured"}
    if not services.is_configured("model_client"):
        return {"status": "not_ready", "reason": "model_client_not_configured"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Kubernetes liveness probe."""
    return {"status": "alive"}
