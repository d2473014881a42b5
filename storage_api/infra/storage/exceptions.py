"""Storage-specific exceptions for S3 operations.

Structured storage errors carrying an HTTP status code and metadata that the
application's exception handlers render as RFC 7807 problem responses.

Example:
    try:
        await client.delete_bucket(Bucket=bucket)
    except ClientError as e:
        raise map_boto_error(e, operation="delete_bucket", key=bucket) from e
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, Any

from storage_api.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError


class StorageError(AppException):
    """Base exception for all storage-related errors.

    Attributes:
        code: Error code identifier for programmatic error handling.
        message: Human-readable error message.
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            status_code: HTTP status code (default: 500).
            metadata: Additional error context.
        """
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class StorageNotConfiguredError(StorageError):
    """Raised when the S3 client has not been started or cannot be created."""

    def __init__(
        self,
        message: str = "Storage is not configured or not started",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_CONFIGURED",
            status_code=503,
            metadata=metadata,
        )


class StorageNotFoundError(StorageError):
    """Raised when a bucket or object does not exist."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_FOUND",
            status_code=404,
            metadata=metadata,
        )


class StoragePermissionError(StorageError):
    """Raised when credentials are missing, invalid or lack permission."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="STORAGE_PERMISSION_DENIED",
            status_code=403,
            metadata=metadata,
        )


class StorageConflictError(StorageError):
    """Raised when the request conflicts with the bucket's state (exists, not empty)."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="STORAGE_CONFLICT",
            status_code=409,
            metadata=metadata,
        )


class StorageValidationError(StorageError):
    """Raised when the provider rejects a name or argument."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="STORAGE_VALIDATION_ERROR",
            status_code=400,
            metadata=metadata,
        )


class StorageTimeoutError(StorageError):
    """Raised when the provider times out or throttles the request."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code="STORAGE_TIMEOUT",
            status_code=504,
            metadata=metadata,
        )


class StorageOperationError(StorageError):
    """Failure of an HTTP-facing storage operation.

    Every failure at the HTTP surface collapses into this error: the status
    is always 500 whatever the underlying cause, and the cause's message,
    type, provider error code and (optionally) formatted stack trace travel
    in the problem body.

    Example:
        try:
            await storage.create_bucket(name)
        except Exception as e:
            raise StorageOperationError("Could not create a bucket.", e) from e
    """

    def __init__(
        self,
        message: str,
        cause: BaseException,
        *,
        include_stack_trace: bool = True,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize operation error.

        Args:
            message: Fixed, operation-specific message used as problem detail.
            cause: The exception raised by the storage call.
            include_stack_trace: Embed the formatted traceback of ``cause``.
            metadata: Additional context (bucket, key, ...).
        """
        self.cause = cause
        details: dict[str, Any] = {
            **(metadata or {}),
            "error": str(cause),
            "error_type": type(cause).__name__,
        }
        if isinstance(cause, StorageError):
            if "aws_error_code" in cause.extra:
                details["aws_error_code"] = cause.extra["aws_error_code"]
            details["storage_error_code"] = cause.code
        if include_stack_trace:
            details["stack_trace"] = "".join(traceback.format_exception(cause))

        super().__init__(
            message=message,
            code="STORAGE_OPERATION_ERROR",
            status_code=500,
            metadata=details,
        )


def map_boto_error(
    error: ClientError,
    operation: str,
    key: str | None = None,
) -> StorageError:
    """Map a botocore ClientError to a domain-specific StorageError.

    Args:
        error: The ClientError raised by the S3 client.
        operation: The storage operation being performed (e.g., "create_bucket").
        key: Bucket name or object key being operated on.

    Returns:
        StorageError: Appropriate domain-specific storage exception.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket -> StorageNotFoundError (404)
        - AccessDenied, InvalidAccessKeyId, ... -> StoragePermissionError (403)
        - BucketAlreadyExists, BucketNotEmpty, ... -> StorageConflictError (409)
        - RequestTimeout, SlowDown, ... -> StorageTimeoutError (504)
        - InvalidBucketName, InvalidArgument, ... -> StorageValidationError (400)
        - Others -> StorageError (500)
    """
    error_info = error.response.get("Error", {})
    error_code = error_info.get("Code", "Unknown")
    error_message = error_info.get("Message", str(error))

    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "aws_error_message": error_message,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }

    if key:
        metadata["key"] = key

    if "BucketName" in error_info:
        metadata["bucket"] = error_info["BucketName"]  # type: ignore[typeddict-item]

    message = f"{operation.capitalize()} failed: {error_message}"

    if error_code in {"NoSuchKey", "NoSuchBucket", "NotFound", "404"}:
        return StorageNotFoundError(message=message, metadata=metadata)

    if error_code in {
        "AccessDenied",
        "ExpiredToken",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "InvalidToken",
        "AllAccessDisabled",
    }:
        return StoragePermissionError(message=message, metadata=metadata)

    if error_code in {
        "BucketAlreadyExists",
        "BucketAlreadyOwnedByYou",
        "BucketNotEmpty",
        "OperationAborted",
    }:
        return StorageConflictError(message=message, metadata=metadata)

    if error_code in {"RequestTimeout", "RequestTimeTooSkewed", "SlowDown"}:
        return StorageTimeoutError(
            message=f"{operation.capitalize()} timed out: {error_message}",
            metadata=metadata,
        )

    if error_code in {
        "InvalidRequest",
        "InvalidArgument",
        "MalformedXML",
        "InvalidBucketName",
        "InvalidTag",
        "KeyTooLongError",
        "IllegalVersioningConfigurationException",
    }:
        return StorageValidationError(message=message, metadata=metadata)

    return StorageError(
        message=message,
        code="STORAGE_ERROR",
        status_code=500,
        metadata=metadata,
    )
