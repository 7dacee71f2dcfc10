"""
app/main.py

Purpose: Application entry point

- Initializes FastAPI app
- Loads configuration and logging
- Registers request gates, exception handlers and routes
- Validates destinations before serving (refuses to start without any)
- Manages application lifecycle (startup/shutdown)
"""

from contextlib import asynccontextmanager
from typing import Optional, Sequence
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import ingest
from app.core.config import Settings, describe_config, read_environment, settings, validate_destinations
from app.core.errors import add_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.core.middleware import RateLimiter, add_middlewares
from app.models.destination import Destination
from app.schemas.ingest import HealthResponse
from app.services.rotation import DestinationRotator
from app.services.wati_service import WatiService

APP_NAME = "WATI Verification Relay"
APP_VERSION = "1.0.0"

logger = get_logger(__name__)


def create_app(
    config: Optional[Settings] = None,
    destinations: Optional[Sequence[Destination]] = None,
    limiter: Optional[RateLimiter] = None
) -> FastAPI:
    """
    Builds the relay application.

    Args:
        config: Settings to use (defaults to the global settings)
        destinations: Destinations to rotate over (defaults to the environment)
        limiter: Rate limiter (defaults to one built from config)
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        logger.info("🚀 Starting relay...")

        try:
            environ = read_environment()
            logger.info(f"🌍 Loaded variables: {describe_config(config, environ)}")

            loaded = list(destinations) if destinations is not None else config.get_destinations()
            validate_destinations(loaded)

            app.state.wati_service = WatiService(
                rotator=DestinationRotator(loaded),
                template_name=config.TEMPLATE_NAME,
                timeout=config.FORWARD_TIMEOUT_SECONDS
            )
            logger.info(f"✅ {len(loaded)} destination(s) configured for round robin")

        except Exception as e:
            logger.critical(f"Failed to start relay: {str(e)}", exc_info=True)
            raise

        logger.info(f"🎉 Relay listening on port {config.PORT} (environment: {config.ENVIRONMENT})")

        yield  # Application runs here

        logger.info("🛑 Shutting down relay...")
        await app.state.wati_service.close()
        logger.info("👋 Relay shut down")

    app = FastAPI(
        title=APP_NAME,
        description="Relays verification codes to WhatsApp (WATI) endpoints in round robin",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
    )

    add_exception_handlers(app)
    add_middlewares(app, config, limiter)

    # CORS is registered last so it wraps the gates and answers preflights
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ingest.router, tags=["Relay"])

    @app.get("/", tags=["Health"])
    async def root():
        """Liveness message."""
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "status": "running"
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Liveness probe, never authenticated."""
        return HealthResponse(ok=True, ts=int(time.time() * 1000))

    return app


setup_logging()
app = create_app()


def run():
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
