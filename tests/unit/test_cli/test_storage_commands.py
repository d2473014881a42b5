"""Tests for the storage CLI commands.

Testing approach:
- Uses Click's CliRunner for command invocation
- Replaces S3Backend with an AsyncMock usable as an async context manager
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner
import pytest

from storage_api.cli.main import cli
from storage_api.infra.storage import BucketInfo, StorageNotFoundError

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create Click CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def backend():
    """AsyncMock backend returned by ``async with S3Backend(...)``."""
    instance = AsyncMock()
    instance.__aenter__.return_value = instance
    instance.__aexit__.return_value = None
    return instance


@pytest.fixture
def backend_cls(backend):
    with patch(
        "storage_api.cli.commands.storage.S3Backend", MagicMock(return_value=backend)
    ) as mocked:
        yield mocked


# =============================================================================
# Commands
# =============================================================================


@pytest.mark.unit
class TestStorageCommands:
    def test_create_bucket(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "create-bucket", "reports"])

        assert result.exit_code == 0, result.output
        assert "bucket reports is created." in result.output
        backend.create_bucket.assert_awaited_once_with("reports")
        backend.__aexit__.assert_awaited_once()

    def test_list_buckets(self, cli_runner, backend_cls, backend):
        backend.list_buckets.return_value = [
            BucketInfo(name="reports", creation_date=datetime(2024, 1, 15, tzinfo=UTC)),
            BucketInfo(name="archive"),
        ]

        result = cli_runner.invoke(cli, ["storage", "list-buckets"])

        assert result.exit_code == 0, result.output
        assert "reports" in result.output
        assert "2024-01-15T00:00:00+00:00" in result.output
        assert "archive" in result.output
        assert "2 bucket(s)" in result.output

    def test_list_buckets_empty(self, cli_runner, backend_cls, backend):
        backend.list_buckets.return_value = []

        result = cli_runner.invoke(cli, ["storage", "list-buckets"])

        assert result.exit_code == 0
        assert "No buckets found" in result.output

    def test_delete_bucket_requires_confirmation(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "delete-bucket", "reports"], input="n\n")

        assert result.exit_code == 1
        backend.delete_bucket.assert_not_awaited()

    def test_delete_bucket(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "delete-bucket", "reports", "--yes"])

        assert result.exit_code == 0, result.output
        assert "bucket reports is deleted." in result.output
        backend.delete_bucket.assert_awaited_once_with("reports")

    def test_enable_versioning(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "enable-versioning", "reports"])

        assert result.exit_code == 0, result.output
        assert "bucket reports is enabled." in result.output
        backend.enable_versioning.assert_awaited_once_with("reports")

    def test_create_folder_decodes_slash(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "create-folder", "reports", "2024%2Fjan"])

        assert result.exit_code == 0, result.output
        assert "bucket reports folderName 2024%2Fjan is created." in result.output
        backend.put_object.assert_awaited_once_with("reports", "2024/jan")

    def test_create_object(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "create-object", "reports", "hello.txt"])

        assert result.exit_code == 0, result.output
        assert "file reports objectName hello.txt is created." in result.output
        backend.put_object.assert_awaited_once_with(
            "reports",
            "hello.txt",
            body=b"Welcome to Minimal API AWS SDK S3 Development",
            content_type="text/plain",
        )

    def test_tag_object_defaults(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(cli, ["storage", "tag-object", "reports", "hello.txt"])

        assert result.exit_code == 0, result.output
        assert "bucket reports is adding metadata." in result.output
        backend.put_object_tagging.assert_awaited_once_with(
            "reports", "hello.txt", {"test-metadata-key": "test-metadata-value"}
        )

    def test_tag_object_custom(self, cli_runner, backend_cls, backend):
        result = cli_runner.invoke(
            cli,
            ["storage", "tag-object", "reports", "hello.txt", "--tag-key", "owner", "--tag-value", "ops"],
        )

        assert result.exit_code == 0, result.output
        backend.put_object_tagging.assert_awaited_once_with(
            "reports", "hello.txt", {"owner": "ops"}
        )

    def test_download_link(self, cli_runner, backend_cls, backend):
        backend.generate_presigned_download_url.return_value = "http://signed/url"

        result = cli_runner.invoke(
            cli, ["storage", "download-link", "reports", "hello.txt", "--expires-in", "60"]
        )

        assert result.exit_code == 0, result.output
        assert "http://signed/url" in result.output
        backend.generate_presigned_download_url.assert_awaited_once_with(
            "reports", "hello.txt", 60
        )

    def test_failure_exits_with_error(self, cli_runner, backend_cls, backend):
        backend.enable_versioning.side_effect = StorageNotFoundError("Bucket missing")

        result = cli_runner.invoke(cli, ["storage", "enable-versioning", "missing"])

        assert result.exit_code == 1
        assert "Could not enable bucket versioning: Bucket missing" in result.output


@pytest.mark.unit
class TestInfoCommand:
    def test_info_hides_credentials(self, cli_runner):
        result = cli_runner.invoke(cli, ["storage", "info"])

        assert result.exit_code == 0, result.output
        assert "Region: us-east-1" in result.output
        assert "Presigned URL Expiry: 21600s over http" in result.output
        assert "Credentials: Configured" in result.output
        assert "testing" not in result.output

    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "storage-api, version 0.1.0" in result.output


@pytest.mark.unit
def test_serve_uses_settings(cli_runner):
    with patch("storage_api.cli.commands.server.uvicorn.run") as run:
        result = cli_runner.invoke(cli, ["serve", "--port", "9000"])

    assert result.exit_code == 0, result.output
    run.assert_called_once()
    args, kwargs = run.call_args
    assert args == ("storage_api.app.main:app",)
    assert kwargs["port"] == 9000
    assert kwargs["host"] == "0.0.0.0"
