"""Pytest configuration and shared fixtures.

Organization:
    - Application Fixtures: FastAPI app and HTTP client
    - Storage Fixtures: mocked and in-memory storage backends
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime
import os
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_ROOT_PATH", "")
os.environ.setdefault("STORAGE_REGION", "us-east-1")
os.environ.setdefault("STORAGE_ACCESS_KEY", "testing")
os.environ.setdefault("STORAGE_SECRET_KEY", "testing")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from storage_api.core.settings import clear_all_caches  # noqa: E402
from storage_api.infra.storage import (  # noqa: E402
    BucketInfo,
    PutResult,
    StorageConflictError,
    StorageNotFoundError,
    reset_storage_backend,
)
from storage_api.infra.storage.dependencies import get_storage  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Reload settings and forget the backend singleton around every test."""
    clear_all_caches()
    reset_storage_backend()
    yield
    clear_all_caches()
    reset_storage_backend()


# ============================================================================
# Storage Fixtures
# ============================================================================


class InMemoryStorageBackend:
    """Storage backend keeping buckets and objects in dictionaries."""

    backend_name = "memory"

    def __init__(self) -> None:
        self.buckets: dict[str, datetime] = {}
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str | None] = {}
        self.tags: dict[tuple[str, str], dict[str, str]] = {}
        self.versioned: set[str] = set()

    @property
    def is_ready(self) -> bool:
        return True

    async def startup(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    def _require_bucket(self, bucket: str) -> None:
        if bucket not in self.buckets:
            raise StorageNotFoundError(f"Bucket {bucket} does not exist")

    async def create_bucket(self, bucket: str) -> None:
        self.buckets.setdefault(bucket, datetime.now(UTC))

    async def list_buckets(self) -> list[BucketInfo]:
        return [BucketInfo(name=name, creation_date=created) for name, created in self.buckets.items()]

    async def delete_bucket(self, bucket: str) -> None:
        self._require_bucket(bucket)
        if any(b == bucket for b, _ in self.objects):
            raise StorageConflictError(f"Bucket {bucket} is not empty")
        del self.buckets[bucket]
        self.versioned.discard(bucket)

    async def enable_versioning(self, bucket: str) -> None:
        self._require_bucket(bucket)
        self.versioned.add(bucket)

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes = b"",
        content_type: str | None = None,
    ) -> PutResult:
        self._require_bucket(bucket)
        self.objects[(bucket, key)] = body
        self.content_types[(bucket, key)] = content_type
        return PutResult(bucket=bucket, key=key)

    async def put_object_tagging(self, bucket: str, key: str, tags: dict[str, str]) -> None:
        self._require_bucket(bucket)
        if (bucket, key) not in self.objects:
            raise StorageNotFoundError(f"Object {key} does not exist")
        self.tags[(bucket, key)] = dict(tags)

    async def generate_presigned_download_url(
        self, bucket: str, key: str, expires_in: int | None = None
    ) -> str:
        return f"http://{bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in or 21600}"


@pytest.fixture
def memory_storage() -> InMemoryStorageBackend:
    """Empty in-memory storage backend."""
    return InMemoryStorageBackend()


@pytest.fixture
def mock_storage() -> AsyncMock:
    """Storage backend whose every operation is an AsyncMock."""
    storage = AsyncMock()
    storage.is_ready = True
    storage.backend_name = "mock"
    return storage


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app():
    """Create FastAPI application for testing.

    The lifespan does not run under ASGITransport, so no S3 client is ever
    created; tests inject a backend through dependency overrides.
    """
    from storage_api.app.main import create_app

    return create_app()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing.

    Yields:
        Async HTTP client bound to the app without a storage override.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def mock_client(app, mock_storage: AsyncMock) -> AsyncGenerator[AsyncClient]:
    """HTTP client whose storage dependency is ``mock_storage``."""
    app.dependency_overrides[get_storage] = lambda: mock_storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def memory_client(
    app, memory_storage: InMemoryStorageBackend
) -> AsyncGenerator[AsyncClient]:
    """HTTP client whose storage dependency is ``memory_storage``."""
    app.dependency_overrides[get_storage] = lambda: memory_storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
