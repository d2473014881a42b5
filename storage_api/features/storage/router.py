"""Bucket and object endpoints.

Every endpoint forwards its path parameters to one storage call. Any
failure of that call is reported as a 500 problem response carrying the
cause (see StorageOperationError).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from fastapi import APIRouter, HTTPException, Request, status

from storage_api.core.schemas import ProblemDetails
from storage_api.core.settings import get_app_settings, get_storage_settings
from storage_api.infra.storage.dependencies import StorageDep
from storage_api.infra.storage.exceptions import StorageOperationError

from .cancellation import ClientDisconnectedError, run_until_disconnected
from .schemas import BucketResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["storage"],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {
            "model": ProblemDetails,
            "description": "The storage call failed",
        },
    },
)


def folder_key(folder_name: str) -> str:
    """Turn a folder name into an object key, decoding literal ``%2F`` to ``/``.

    The server percent-decodes the path once, so ``a%2Fb`` already arrives
    as ``a/b``; a double-encoded ``a%252Fb`` arrives as the literal
    ``a%2Fb`` and is decoded here.
    """
    return folder_name.replace("%2F", "/").replace("%2f", "/")


async def _forward(
    request: Request,
    call: Awaitable[T],
    failure_message: str,
    **metadata: Any,
) -> T:
    """Run a storage call and convert any failure into StorageOperationError."""
    app_settings = get_app_settings()
    try:
        return await run_until_disconnected(
            request, call, poll_interval=app_settings.disconnect_poll_interval
        )
    except ClientDisconnectedError:
        raise
    except Exception as e:
        logger.error(
            failure_message,
            extra={**metadata, "error": str(e), "error_type": type(e).__name__},
        )
        raise StorageOperationError(
            failure_message,
            e,
            include_stack_trace=app_settings.expose_stack_traces,
            metadata=metadata,
        ) from e


# ============================================================================
# Bucket Management Endpoints
# ============================================================================


@router.post(
    "/create-bucket/{name}",
    response_model=str,
    summary="Create a bucket",
)
async def create_bucket(name: str, request: Request, storage: StorageDep) -> str:
    await _forward(request, storage.create_bucket(name), "Could not create a bucket.", bucket=name)
    return f"bucket {name} is created."


@router.get(
    "/list-buckets",
    response_model=list[BucketResponse],
    summary="List buckets",
    description="List every bucket visible to the configured credentials.",
)
async def list_buckets(request: Request, storage: StorageDep) -> list[BucketResponse]:
    buckets = await _forward(request, storage.list_buckets(), "Could not list buckets.")
    return [BucketResponse.from_info(b) for b in buckets]


@router.delete(
    "/delete-bucket/{name}",
    response_model=str,
    summary="Delete a bucket",
    description="Delete an empty bucket.",
)
async def delete_bucket(name: str, request: Request, storage: StorageDep) -> str:
    await _forward(request, storage.delete_bucket(name), "Could not delete a bucket.", bucket=name)
    return f"bucket {name} is deleted."


@router.post(
    "/enable-versioning-bucket/{name}",
    response_model=str,
    summary="Enable bucket versioning",
)
async def enable_versioning(name: str, request: Request, storage: StorageDep) -> str:
    await _forward(
        request,
        storage.enable_versioning(name),
        "Could not enable bucket versioning.",
        bucket=name,
    )
    return f"bucket {name} is enabled."


# ============================================================================
# Object Endpoints
# ============================================================================


@router.post(
    "/create-folder/{bucket_name}/{folder_name:path}",
    response_model=str,
    summary="Create a folder",
    description=(
        "Create a zero-byte object acting as a folder. The folder name may span "
        "several segments: `2024%2Fjanuary`, `2024/january` and `2024%252Fjanuary` "
        "all create the key `2024/january`."
    ),
)
async def create_folder(
    bucket_name: str,
    folder_name: str,
    request: Request,
    storage: StorageDep,
) -> str:
    if not folder_name:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    key = folder_key(folder_name)
    await _forward(
        request,
        storage.put_object(bucket_name, key),
        "Could not create a folder.",
        bucket=bucket_name,
        key=key,
    )
    return f"bucket {bucket_name} folderName {folder_name} is created."


@router.post(
    "/create-object/{bucket_name}/{object_name}",
    response_model=str,
    summary="Create a text object",
    description="Write a fixed plain-text object under the given key.",
)
async def create_object(
    bucket_name: str,
    object_name: str,
    request: Request,
    storage: StorageDep,
) -> str:
    storage_settings = get_storage_settings()
    await _forward(
        request,
        storage.put_object(
            bucket_name,
            object_name,
            body=storage_settings.default_object_body.encode("utf-8"),
            content_type=storage_settings.default_object_content_type,
        ),
        "Could not create an object.",
        bucket=bucket_name,
        key=object_name,
    )
    return f"file {bucket_name} objectName {object_name} is created."


@router.put(
    "/add-metadata-bucket/{bucket_name}/{file_name}",
    response_model=str,
    summary="Tag an object",
    description="Replace the object's tag set with the configured default tag.",
)
async def add_metadata(
    bucket_name: str,
    file_name: str,
    request: Request,
    storage: StorageDep,
) -> str:
    storage_settings = get_storage_settings()
    await _forward(
        request,
        storage.put_object_tagging(
            bucket_name,
            file_name,
            {storage_settings.default_tag_key: storage_settings.default_tag_value},
        ),
        "Could not add metadata.",
        bucket=bucket_name,
        key=file_name,
    )
    return f"bucket {bucket_name} is adding metadata."


@router.get(
    "/generate-download-link/{bucket_name}/{key_name}",
    response_model=str,
    summary="Generate a download link",
    description="Pre-signed GET URL for the object, valid for six hours by default.",
)
async def generate_download_link(
    bucket_name: str,
    key_name: str,
    request: Request,
    storage: StorageDep,
) -> str:
    return await _forward(
        request,
        storage.generate_presigned_download_url(bucket_name, key_name),
        "Could not generate a download link.",
        bucket=bucket_name,
        key=key_name,
    )
