"""Storage backend protocol and normalized data structures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True)
class BucketInfo:
    """Information about a storage bucket.

    Attributes:
        name: Bucket name
        creation_date: When bucket was created
    """

    name: str
    creation_date: datetime | None = None


@dataclass(frozen=True)
class PutResult:
    """Result of a put_object call.

    Attributes:
        bucket: Bucket name
        key: Object key written
        etag: Entity tag of the stored object
        version_id: Version ID (for versioned buckets)
    """

    bucket: str
    key: str
    etag: str | None = None
    version_id: str | None = None


class StorageBackend(Protocol):
    """Operations the HTTP handlers and CLI need from a storage provider.

    Uses structural typing so tests can hand in any object with these
    coroutines (an AsyncMock, an in-memory fake) in place of S3Backend.
    """

    @property
    def is_ready(self) -> bool:
        """Whether the backend has been started."""
        ...

    async def startup(self) -> None:
        """Open provider connections."""
        ...

    async def shutdown(self) -> None:
        """Close provider connections."""
        ...

    async def create_bucket(self, bucket: str) -> None:
        """Create a bucket."""
        ...

    async def list_buckets(self) -> list[BucketInfo]:
        """List buckets visible to the configured credentials."""
        ...

    async def delete_bucket(self, bucket: str) -> None:
        """Delete an empty bucket."""
        ...

    async def enable_versioning(self, bucket: str) -> None:
        """Turn on object versioning for a bucket."""
        ...

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes = b"",
        content_type: str | None = None,
    ) -> PutResult:
        """Write an object."""
        ...

    async def put_object_tagging(self, bucket: str, key: str, tags: dict[str, str]) -> None:
        """Replace the tag set of an object."""
        ...

    async def generate_presigned_download_url(
        self,
        bucket: str,
        key: str,
        expires_in: int | None = None,
    ) -> str:
        """Create a time-limited GET URL for an object."""
        ...
