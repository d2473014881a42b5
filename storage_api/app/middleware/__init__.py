"""Middleware configuration for FastAPI application.

Middleware is applied in REVERSE order (last added = first to execute).
Execution order, outermost first:

1. HTTPS redirect (optional, APP_HTTPS_REDIRECT=true)
2. Request ID: binds request_id into the logging context
3. CORS (only when APP_CORS_ORIGINS is set)

Example Usage:
    from storage_api.app.middleware import configure_middleware
    from storage_api.core.settings import get_settings

    configure_middleware(app, get_settings())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware

from storage_api.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from storage_api.core.settings import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "RequestIDMiddleware",
    "configure_middleware",
]


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure all middleware for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Unified settings instance
    """
    app_settings = settings.app

    if app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=app_settings.cors_allow_credentials,
            allow_methods=app_settings.cors_allow_methods,
            allow_headers=app_settings.cors_allow_headers,
        )
        logger.debug("CORS middleware enabled", extra={"origins": app_settings.cors_origins})

    if settings.logging.include_request_id:
        app.add_middleware(RequestIDMiddleware)

    if app_settings.https_redirect:
        app.add_middleware(HTTPSRedirectMiddleware)
        logger.debug("HTTPS redirect middleware enabled")
