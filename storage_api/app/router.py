"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from storage_api.features.storage.router import router as storage_router

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI) -> None:
    """Register all feature routers with the application.

    Storage routes are mounted at the root: their paths are part of the
    public interface.

    Args:
        app: FastAPI application instance.
    """
    app.include_router(storage_router)
    logger.debug("Routers registered", extra={"routes": len(app.routes)})
