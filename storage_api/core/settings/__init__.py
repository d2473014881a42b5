"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app, logging, storage), read from environment
variables with a per-domain prefix (APP_, LOG_, STORAGE_) and an optional
.env file, frozen after validation, and cached by their loaders.

Import settings via cached loaders:
    from storage_api.core.settings import get_storage_settings

Or use unified settings for access to all domains:
    from storage_api.core.settings import get_settings

    settings = get_settings()
    print(settings.app.host)
    print(settings.storage.endpoint)
"""

from __future__ import annotations

from .loader import (
    clear_all_caches,
    get_app_settings,
    get_logging_settings,
    get_storage_settings,
)
from .unified import Settings, get_settings

__all__ = [
    "Settings",
    "clear_all_caches",
    "get_app_settings",
    "get_logging_settings",
    "get_settings",
    "get_storage_settings",
]
