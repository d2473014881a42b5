"""Object storage infrastructure.

The process-wide backend is created lazily by ``get_storage_backend()`` and
started/stopped by the application lifespan (or by a CLI command).

Usage:
    from storage_api.infra.storage import get_storage_backend

    backend = get_storage_backend()
    await backend.startup()
    await backend.create_bucket("reports")
    await backend.shutdown()
"""

from __future__ import annotations

from storage_api.core.settings import get_storage_settings

from .backends import BucketInfo, PutResult, StorageBackend
from .backends.s3 import S3Backend
from .exceptions import (
    StorageConflictError,
    StorageError,
    StorageNotConfiguredError,
    StorageNotFoundError,
    StorageOperationError,
    StoragePermissionError,
    StorageTimeoutError,
    StorageValidationError,
    map_boto_error,
)

_storage_backend: S3Backend | None = None


def get_storage_backend() -> S3Backend:
    """Get the singleton storage backend instance.

    Creates the instance on first call. The backend must be started via
    startup() before use.
    """
    global _storage_backend
    if _storage_backend is None:
        _storage_backend = S3Backend(get_storage_settings())
    return _storage_backend


def reset_storage_backend() -> None:
    """Forget the singleton instance (for testing only)."""
    global _storage_backend
    _storage_backend = None


__all__ = [
    "BucketInfo",
    "PutResult",
    "S3Backend",
    "StorageBackend",
    "StorageConflictError",
    "StorageError",
    "StorageNotConfiguredError",
    "StorageNotFoundError",
    "StorageOperationError",
    "StoragePermissionError",
    "StorageTimeoutError",
    "StorageValidationError",
    "get_storage_backend",
    "map_boto_error",
    "reset_storage_backend",
]
