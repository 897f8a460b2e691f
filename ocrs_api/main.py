"""
OCRS API Server - Main Application

FastAPI-based API server that recognizes text in uploaded images.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .engine.manager import EngineManager
from .middleware import register_error_handlers
from .routers import ocr_router, health_router
from . import __version__

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup downloads and loads both models before the server accepts
    connections. Any failure is raised so the process exits.
    """
    # Startup
    logger.info("Starting OCRS API Server...")
    manager: EngineManager = app.state.engine_manager

    try:
        manager.initialize()
    except Exception as e:
        logger.error(f"Failed to initialize engine: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down OCRS API Server...")
    manager.shutdown()
    logger.info("Server shutdown complete.")


def create_app(
    settings: Optional[Settings] = None,
    engine_manager: Optional[EngineManager] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration settings. If None, uses global settings.
        engine_manager: Pre-built engine manager. If None, one is created
            from the settings.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="OCRS API",
        description="""
## OCRS API Server

Recognizes the text in an uploaded image.

### Endpoints

- `POST /v1/recognize`: upload an image as the `file` form field (max 15 MiB)
- `GET /health`: liveness check

### Configuration

All parameters can be configured via environment variables (prefix: `OCRS_API_`)
or command-line arguments.
        """,
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine_manager = engine_manager or EngineManager(settings)

    register_error_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(ocr_router)

    return app


# Create the application instance
app = create_app()
