"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from storage_api.app.exception_handlers import configure_exception_handlers
from storage_api.app.lifespan import lifespan
from storage_api.app.middleware import configure_middleware
from storage_api.app.router import setup_routers
from storage_api.core.settings import get_settings


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Settings are loaded once and cached via LRU cache.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        # Interactive documentation (Swagger UI, ReDoc) and schema
        docs_url=app_settings.get_docs_url(),
        redoc_url=app_settings.get_redoc_url(),
        openapi_url=app_settings.get_openapi_url(),
        root_path=app_settings.root_path,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    # Configure exception handlers (must be before middleware)
    configure_exception_handlers(app)

    configure_middleware(app, settings)

    setup_routers(app)

    return app


# Application instance for uvicorn
app = create_app()
