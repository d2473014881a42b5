"""Storage commands for S3-compatible object storage.

Each command opens its own backend, runs one operation and prints the same
confirmation the HTTP API returns.
"""

import sys

import click

from storage_api.cli.utils import banner, coro, error, field, info, success, warning
from storage_api.core.settings import get_storage_settings
from storage_api.features.storage.router import folder_key
from storage_api.infra.storage import S3Backend


@click.group(name="storage")
def storage() -> None:
    """Storage commands.

    Create, list and delete buckets, write objects and tags, and sign
    download links against the configured S3 endpoint.
    """


@storage.command(name="info")
def info_cmd() -> None:
    """Show storage configuration.

    Credentials are reported as configured or not, never printed.
    """
    settings = get_storage_settings()

    banner("Storage Configuration")
    field("Endpoint", settings.endpoint or "AWS S3 (default)")
    field("Region", settings.region)
    field("Use SSL", settings.use_ssl)
    field("Addressing Style", settings.addressing_style)
    field("Retries", f"{settings.max_retries} ({settings.retry_mode})")
    field(
        "Presigned URL Expiry",
        f"{settings.presigned_url_expiry_seconds}s over {settings.presigned_url_scheme}",
    )
    field("Object Body", settings.default_object_body)
    field("Object Tag", f"{settings.default_tag_key}={settings.default_tag_value}")

    if settings.has_static_credentials:
        success("Credentials: Configured")
    else:
        warning("Credentials: Not configured (default AWS credential chain)")


@storage.command(name="create-bucket")
@click.argument("name")
@coro
async def create_bucket(name: str) -> None:
    """Create bucket NAME."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            await backend.create_bucket(name)
    except Exception as e:
        error(f"Could not create a bucket: {e}")
        sys.exit(1)

    success(f"bucket {name} is created.")


@storage.command(name="list-buckets")
@coro
async def list_buckets() -> None:
    """List buckets visible to the configured credentials."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            buckets = await backend.list_buckets()
    except Exception as e:
        error(f"Could not list buckets: {e}")
        sys.exit(1)

    if not buckets:
        info("No buckets found")
        return

    for bucket in buckets:
        created = bucket.creation_date.isoformat() if bucket.creation_date else "-"
        click.echo(f"{bucket.name:<63}  {created}")
    info(f"{len(buckets)} bucket(s)")


@storage.command(name="delete-bucket")
@click.argument("name")
@click.confirmation_option(prompt="Delete this bucket?")
@coro
async def delete_bucket(name: str) -> None:
    """Delete empty bucket NAME."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            await backend.delete_bucket(name)
    except Exception as e:
        error(f"Could not delete a bucket: {e}")
        sys.exit(1)

    success(f"bucket {name} is deleted.")


@storage.command(name="enable-versioning")
@click.argument("name")
@coro
async def enable_versioning(name: str) -> None:
    """Enable versioning on bucket NAME."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            await backend.enable_versioning(name)
    except Exception as e:
        error(f"Could not enable bucket versioning: {e}")
        sys.exit(1)

    success(f"bucket {name} is enabled.")


@storage.command(name="create-folder")
@click.argument("bucket")
@click.argument("folder")
@coro
async def create_folder(bucket: str, folder: str) -> None:
    """Create zero-byte folder object FOLDER in BUCKET."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            await backend.put_object(bucket, folder_key(folder))
    except Exception as e:
        error(f"Could not create a folder: {e}")
        sys.exit(1)

    success(f"bucket {bucket} folderName {folder} is created.")


@storage.command(name="create-object")
@click.argument("bucket")
@click.argument("key")
@coro
async def create_object(bucket: str, key: str) -> None:
    """Write the default text object under KEY in BUCKET."""
    settings = get_storage_settings()
    try:
        async with S3Backend(settings) as backend:
            await backend.put_object(
                bucket,
                key,
                body=settings.default_object_body.encode("utf-8"),
                content_type=settings.default_object_content_type,
            )
    except Exception as e:
        error(f"Could not create an object: {e}")
        sys.exit(1)

    success(f"file {bucket} objectName {key} is created.")


@storage.command(name="tag-object")
@click.argument("bucket")
@click.argument("key")
@click.option("--tag-key", default=None, help="Tag key (default: from settings)")
@click.option("--tag-value", default=None, help="Tag value (default: from settings)")
@coro
async def tag_object(bucket: str, key: str, tag_key: str | None, tag_value: str | None) -> None:
    """Replace the tag set of object KEY in BUCKET with a single tag."""
    settings = get_storage_settings()
    tags = {
        tag_key or settings.default_tag_key: tag_value or settings.default_tag_value,
    }
    try:
        async with S3Backend(settings) as backend:
            await backend.put_object_tagging(bucket, key, tags)
    except Exception as e:
        error(f"Could not add metadata: {e}")
        sys.exit(1)

    success(f"bucket {bucket} is adding metadata.")


@storage.command(name="download-link")
@click.argument("bucket")
@click.argument("key")
@click.option(
    "--expires-in",
    type=int,
    default=None,
    help="Link lifetime in seconds (default: from settings)",
)
@coro
async def download_link(bucket: str, key: str, expires_in: int | None) -> None:
    """Print a pre-signed download URL for object KEY in BUCKET."""
    try:
        async with S3Backend(get_storage_settings()) as backend:
            url = await backend.generate_presigned_download_url(bucket, key, expires_in)
    except Exception as e:
        error(f"Could not generate a download link: {e}")
        sys.exit(1)

    click.echo(url)
