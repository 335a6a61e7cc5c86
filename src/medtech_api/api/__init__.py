"""API routes package."""

from fastapi import APIRouter

from medtech_api.api.accounts import router as accounts_router
from medtech_api.api.health import router as health_router
from medtech_api.api.predictions import router as predictions_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(accounts_router)
api_router.include_router(predictions_router)

__all__ = ["api_router"]
