"""FastAPI dependency injection for the storage backend.

Type Annotations
----------------
StorageDep : the started backend, injected into route handlers.

Example::

    from storage_api.infra.storage.dependencies import StorageDep

    @router.get("/list-buckets")
    async def list_buckets(storage: StorageDep) -> list[BucketResponse]:
        ...

Tests replace ``get_storage`` through ``app.dependency_overrides`` to hand
in a fake backend.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from .backends import StorageBackend


def get_storage() -> StorageBackend:
    """Return the process-wide storage backend.

    Whether it is started is not checked here: calling an operation on a
    backend that failed to start raises StorageNotConfiguredError inside the
    handler, which reports it like any other storage failure.
    """
    from . import get_storage_backend

    return get_storage_backend()


StorageDep = Annotated[StorageBackend, Depends(get_storage)]
