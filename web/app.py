"""FastAPI application hosting the built Permitsy frontend."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from permitsy import __version__
from permitsy.core.settings import PermitsySettings, get_settings
from permitsy.models.backend import BackendClient
from permitsy.services.schema_fix_service import SchemaValidator
from web.middleware import RequestLoggingMiddleware
from web.routes import health_router, spa_router


async def validate_backend_schema(settings: PermitsySettings) -> None:
    """
    Check the backend schema before serving traffic.

    Args:
        settings: Application settings

    Raises:
        SchemaMismatchError: If a table or column is missing
        BackendError: If the backend cannot be queried
    """
    async with BackendClient.from_settings(settings) as backend:
        await SchemaValidator(backend).validate()


def create_app(settings: Optional[PermitsySettings] = None) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        settings: Application settings (default: loaded from environment)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Permitsy web starting up (dist={settings.dist_dir})")
        if not (settings.dist_dir / "index.html").is_file():
            logger.warning(f"No frontend build found in {settings.dist_dir}")
        if settings.validate_schema_on_startup:
            await validate_backend_schema(settings)

        yield

        # Shutdown
        logger.info("Permitsy web shutting down...")

    app = FastAPI(
        title="Permitsy",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.dist_dir = settings.dist_dir

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router)
    assets_dir = settings.dist_dir / "assets"
    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")
    # SPA catch-all goes last
    app.include_router(spa_router)

    return app
