"""FastAPI application factory and main entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from medtech_api.api import api_router
from medtech_api.config import Settings, get_settings
from medtech_api.services.container import ServiceContainer, build_services

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings; unknown level names fall back to INFO."""
    level = getattr(logging, settings.log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    owned = False
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
        owned = True
        logger.info(f"Prediction model endpoint: {settings.model_base_url}")

    yield

    # Shutdown
    logger.info("Shutting down...")
    if owned:
        await app.state.services.aclose()
        app.state.services = None


def create_app(
    settings: Settings | None = None,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Override settings (default: loaded from environment)
        services: Prebuilt collaborators; when omitted they are built at startup
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
# MedTech Maintenance API

Backend for the device-maintenance dashboard.

## Features
- **Fault Prediction**: Score a batch of devices with the hosted fault model,
  enriched with their latest service history
- **Technician Accounts**: Create technicians and (re)send password-set links
- **Notifications**: Email technicians about newly scheduled service tasks
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(api_router)

    # Root endpoint
    @app.get("/")
    async def root() -> dict:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


def main() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "medtech_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers if not settings.debug else 1,
    )


if __name__ == "__main__":
    main()
