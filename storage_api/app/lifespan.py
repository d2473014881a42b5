"""Application lifespan management.

Configures logging and opens the storage backend on startup, closes both
on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from storage_api.core.settings import get_app_settings, get_logging_settings, get_storage_settings
from storage_api.infra.logging import setup_logging
from storage_api.infra.storage import get_storage_backend

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def startup_storage() -> None:
    """Start the storage backend.

    A backend that cannot start leaves the service up in degraded mode
    (every storage call then fails with a 500) unless
    STORAGE_STARTUP_REQUIRE_STORAGE is set.
    """
    settings = get_storage_settings()
    backend = get_storage_backend()
    try:
        await backend.startup()
        logger.info(
            "Storage backend initialized",
            extra={"endpoint": settings.endpoint, "region": settings.region},
        )
    except Exception as e:
        if settings.startup_require_storage:
            logger.error(
                "Storage backend required but unavailable, failing startup",
                extra={"error": str(e)},
            )
            raise
        logger.warning(
            "Storage backend unavailable, continuing in degraded mode",
            extra={"error": str(e)},
        )


async def shutdown_storage() -> None:
    """Close the storage backend."""
    backend = get_storage_backend()
    if not backend.is_ready:
        return
    try:
        await backend.shutdown()
        logger.info("Storage backend shutdown complete")
    except Exception as e:
        logger.warning("Error during storage backend shutdown", extra={"error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    setup_logging(get_logging_settings())
    app_settings = get_app_settings()

    logger.info(
        "Starting application",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    await startup_storage()

    yield

    logger.info("Shutting down application", extra={"service": app_settings.service_name})
    await shutdown_storage()
