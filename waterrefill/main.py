"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .logging_utils import configure_logging, disable_centralized_logging, enable_centralized_logging
from .api import drafts, preferences, reviews, stations, system, users
from .services.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the application.

    When ``services`` is given the caller owns it; otherwise the lifespan
    builds the container on startup and tears it down on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        configure_logging()
        owned = services is None
        container = await ServiceContainer.start(settings) if owned else services
        app.state.services = container

        log_manager = None
        if container.session_factory is not None:
            log_manager = await enable_centralized_logging("api", container.session_factory)
        logger.info("%s %s started", settings.app_name, settings.app_version)
        yield
        # Shutdown
        await disable_centralized_logging(log_manager)
        if owned:
            await container.stop()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(stations.router, prefix="/api/stations", tags=["Stations"])
    app.include_router(drafts.router, prefix="/api/drafts", tags=["Drafts"])
    app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(preferences.router, prefix="/api/preferences", tags=["Preferences"])
    app.include_router(system.router, prefix="/api/system", tags=["System"])

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "operational",
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "waterrefill.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
