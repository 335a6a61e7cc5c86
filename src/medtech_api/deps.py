"""Request-scoped dependencies for FastAPI routes."""

from fastapi import HTTPException, Request, status

from medtech_api.config import Settings, get_settings
from medtech_api.services.accounts import AccountService
from medtech_api.services.container import ServiceContainer
from medtech_api.services.prediction import PredictionService


def get_services(request: Request) -> ServiceContainer:
    """Return the service container built at startup."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services are not initialized",
        )
    return services


def get_prediction_service(request: Request) -> PredictionService:
    return get_services(request).prediction_service


def get_account_service(request: Request) -> AccountService:
    return get_services(request).account_service


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()
