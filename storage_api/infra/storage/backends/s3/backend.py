"""S3-compatible storage backend implementation.

Implements the StorageBackend protocol for AWS S3, MinIO, and other
S3-compatible services using aioboto3.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlsplit, urlunsplit

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from storage_api.infra.storage.exceptions import (
    StorageError,
    StorageNotConfiguredError,
    map_boto_error,
)

from ..protocol import BucketInfo, PutResult

if TYPE_CHECKING:
    from types import TracebackType

    from storage_api.core.settings.storage import StorageSettings

logger = logging.getLogger(__name__)


class S3Backend:
    """S3-compatible storage backend.

    Holds a single aioboto3 S3 client for the lifetime of the process. The
    client is safe to share between concurrent requests.

    Attributes:
        settings: Storage configuration settings
        backend_name: Name identifier for this backend ("s3")
        is_ready: Whether backend is initialized

    Example:
        async with S3Backend(settings) as backend:
            await backend.create_bucket("reports")
    """

    def __init__(self, settings: StorageSettings) -> None:
        """Initialize S3 backend.

        Args:
            settings: Storage settings with S3 configuration
        """
        self.settings = settings
        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_context: Any = None

    @property
    def backend_name(self) -> str:
        """Backend name identifier."""
        return "s3"

    @property
    def is_ready(self) -> bool:
        """Check if backend is initialized and ready."""
        return self._client is not None

    # ========================================================================
    # Lifecycle Management
    # ========================================================================

    async def startup(self) -> None:
        """Create the S3 client and its connection pool."""
        if self._client is not None:
            logger.debug("S3 backend already initialized")
            return

        logger.info(
            "Initializing S3 backend",
            extra={"endpoint": self.settings.endpoint, "region": self.settings.region},
        )

        try:
            boto_config = Config(
                signature_version="s3v4",
                s3={"addressing_style": self.settings.addressing_style},
                retries={
                    "max_attempts": self.settings.max_retries,
                    "mode": self.settings.retry_mode,
                },
                connect_timeout=self.settings.timeout,
                read_timeout=self.settings.timeout,
                max_pool_connections=self.settings.max_pool_connections,
            )

            self._client_context = self._session.client(
                "s3",
                **self.settings.get_boto3_config(),
                config=boto_config,
            )
            self._client = await self._client_context.__aenter__()

            logger.info("S3 backend initialized successfully")

        except Exception as e:
            self._client_context = None
            logger.exception("Failed to initialize S3 backend", extra={"error": str(e)})
            raise StorageError(
                f"Failed to initialize S3 backend: {e}",
                code="STORAGE_INITIALIZATION_ERROR",
            ) from e

    async def shutdown(self) -> None:
        """Close the S3 client."""
        if self._client_context is None:
            logger.debug("S3 backend not initialized, nothing to shutdown")
            return

        logger.info("Shutting down S3 backend")

        try:
            await self._client_context.__aexit__(None, None, None)
        except Exception as e:
            logger.warning("Error closing S3 client", extra={"error": str(e)})
        finally:
            self._client = None
            self._client_context = None

        logger.info("S3 backend shutdown complete")

    def _ensure_client(self) -> Any:
        """Return the live client.

        Raises:
            StorageNotConfiguredError: If startup() has not run
        """
        if self._client is None:
            msg = "S3 backend not initialized. Call startup() first."
            raise StorageNotConfiguredError(msg)
        return self._client

    # ========================================================================
    # Bucket Management
    # ========================================================================

    async def create_bucket(self, bucket: str) -> None:
        """Create a new bucket in the configured region.

        Args:
            bucket: Bucket name

        Raises:
            StorageError: If creation fails
        """
        client = self._ensure_client()
        region = self.settings.region

        kwargs: dict[str, Any] = {"Bucket": bucket}
        # S3 requires CreateBucketConfiguration for regions other than us-east-1
        if region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            await client.create_bucket(**kwargs)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "BucketAlreadyOwnedByYou":
                logger.warning("Bucket already exists and is owned by you", extra={"bucket": bucket})
                return
            logger.exception("Failed to create bucket in S3", extra={"bucket": bucket})
            raise map_boto_error(e, operation="create_bucket", key=bucket) from e

        logger.info("Bucket created in S3", extra={"bucket": bucket, "region": region})

    async def list_buckets(self) -> list[BucketInfo]:
        """List all buckets visible to the configured credentials.

        Raises:
            StorageError: If listing fails
        """
        client = self._ensure_client()

        try:
            response = await client.list_buckets()
        except ClientError as e:
            logger.exception("Failed to list buckets from S3")
            raise map_boto_error(e, operation="list_buckets") from e

        buckets = [
            BucketInfo(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
            for bucket in response.get("Buckets", [])
        ]
        logger.info("Listed buckets from S3", extra={"count": len(buckets)})
        return buckets

    async def delete_bucket(self, bucket: str) -> None:
        """Delete a bucket. S3 refuses to delete non-empty buckets.

        Raises:
            StorageError: If deletion fails
        """
        client = self._ensure_client()

        try:
            await client.delete_bucket(Bucket=bucket)
        except ClientError as e:
            logger.exception("Failed to delete bucket from S3", extra={"bucket": bucket})
            raise map_boto_error(e, operation="delete_bucket", key=bucket) from e

        logger.info("Bucket deleted from S3", extra={"bucket": bucket})

    async def enable_versioning(self, bucket: str) -> None:
        """Set the bucket's versioning status to Enabled.

        Raises:
            StorageError: If the configuration call fails
        """
        client = self._ensure_client()

        try:
            await client.put_bucket_versioning(
                Bucket=bucket,
                VersioningConfiguration={"Status": "Enabled"},
            )
        except ClientError as e:
            logger.exception("Failed to enable bucket versioning", extra={"bucket": bucket})
            raise map_boto_error(e, operation="put_bucket_versioning", key=bucket) from e

        logger.info("Bucket versioning enabled", extra={"bucket": bucket})

    # ========================================================================
    # Object Operations
    # ========================================================================

    async def put_object(
        self,
        bucket: str,
        key: str,
        body: bytes = b"",
        content_type: str | None = None,
    ) -> PutResult:
        """Write an object.

        Args:
            bucket: Target bucket
            key: Object key
            body: Object content (empty for folder placeholders)
            content_type: MIME type

        Returns:
            PutResult with the stored object's ETag and version

        Raises:
            StorageError: If the upload fails
        """
        client = self._ensure_client()

        extra_args: dict[str, Any] = {}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            response = await client.put_object(Bucket=bucket, Key=key, Body=body, **extra_args)
        except ClientError as e:
            logger.exception("Failed to put object to S3", extra={"bucket": bucket, "key": key})
            raise map_boto_error(e, operation="put_object", key=key) from e

        logger.info(
            "Object written to S3",
            extra={
                "bucket": bucket,
                "key": key,
                "size_bytes": len(body),
                "content_type": content_type,
            },
        )
        return PutResult(
            bucket=bucket,
            key=key,
            etag=response.get("ETag", "").strip('"') or None,
            version_id=response.get("VersionId"),
        )

    async def put_object_tagging(self, bucket: str, key: str, tags: dict[str, str]) -> None:
        """Replace the tag set of an object.

        Raises:
            StorageError: If tagging fails
        """
        client = self._ensure_client()
        tag_set = [{"Key": k, "Value": v} for k, v in tags.items()]

        try:
            await client.put_object_tagging(
                Bucket=bucket,
                Key=key,
                Tagging={"TagSet": tag_set},
            )
        except ClientError as e:
            logger.exception("Failed to tag object", extra={"bucket": bucket, "key": key})
            raise map_boto_error(e, operation="put_object_tagging", key=key) from e

        logger.info("Object tagged", extra={"bucket": bucket, "key": key, "tags": tags})

    # ========================================================================
    # Presigned URLs
    # ========================================================================

    async def generate_presigned_download_url(
        self,
        bucket: str,
        key: str,
        expires_in: int | None = None,
    ) -> str:
        """Generate a presigned URL for downloading an object.

        Signing happens locally; no request reaches the provider, so a URL is
        returned even for keys that do not exist.

        Args:
            bucket: Bucket holding the object
            key: Object key
            expires_in: URL expiry in seconds (settings default if None)

        Returns:
            Presigned URL using the configured scheme
        """
        client = self._ensure_client()
        if expires_in is None:
            expires_in = self.settings.presigned_url_expiry_seconds

        try:
            url = await client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except ClientError as e:
            logger.exception("Failed to generate presigned URL", extra={"key": key})
            raise map_boto_error(e, operation="generate_presigned_url", key=key) from e

        url = _with_scheme(cast("str", url), self.settings.presigned_url_scheme)
        logger.info(
            "Generated presigned download URL",
            extra={"bucket": bucket, "key": key, "expires_in": expires_in},
        )
        return url

    # ========================================================================
    # Context Manager Support
    # ========================================================================

    async def __aenter__(self) -> S3Backend:
        """Async context manager entry."""
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await self.shutdown()


def _with_scheme(url: str, scheme: str) -> str:
    """Swap the URL scheme; SigV4 signs the host and path, not the scheme."""
    parts = urlsplit(url)
    if parts.scheme == scheme:
        return url
    return urlunsplit(parts._replace(scheme=scheme))
