"""Unified settings composition for convenient access.

Usage:
    from storage_api.core.settings import get_settings

    settings = get_settings()
    print(settings.app.port)
    print(settings.storage.region)

Each nested settings class still loads from its own environment prefix
(APP_, STORAGE_, LOG_), not from a unified prefix.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

from .app import AppSettings
from .loader import get_app_settings, get_logging_settings, get_storage_settings
from .logs import LoggingSettings
from .storage import StorageSettings


class Settings(BaseModel):
    """Unified settings composing all domain settings."""

    model_config = ConfigDict(frozen=True)

    app: AppSettings = Field(default_factory=get_app_settings)
    logging: LoggingSettings = Field(default_factory=get_logging_settings)
    storage: StorageSettings = Field(default_factory=get_storage_settings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get unified settings instance (cached).

    Returns:
        Settings: Unified settings with all domain configurations.
    """
    return Settings()
