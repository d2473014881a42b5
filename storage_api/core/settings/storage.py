"""S3-compatible object storage configuration settings.

Environment variables use STORAGE_ prefix.
Example: STORAGE_ENDPOINT="http://localhost:9000"
         STORAGE_REGION="eu-central-1"

Supports:
- AWS S3 (default, no endpoint needed)
- MinIO (set endpoint to MinIO server URL)
- LocalStack (set endpoint to LocalStack URL)
- Any S3-compatible storage
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RetryMode = Literal["standard", "adaptive", "legacy"]


class StorageSettings(BaseSettings):
    """S3-compatible object storage settings.

    Environment variables use STORAGE_ prefix.
    Example: STORAGE_ACCESS_KEY=minio STORAGE_SECRET_KEY=minio123

    When access_key/secret_key are omitted, boto3 falls back to its default
    credential chain (environment, shared config, instance role).
    """

    # ──────────────────────────────────────────────────────────────
    # S3 Connection Configuration
    # ──────────────────────────────────────────────────────────────

    endpoint: str | None = Field(
        default=None,
        description="S3-compatible endpoint URL (for MinIO/LocalStack). None for AWS S3.",
    )

    region: str = Field(
        default="us-east-1",
        description="AWS region (used for AWS S3 and request signing)",
    )

    access_key: SecretStr | None = Field(
        default=None,
        description="S3 access key ID",
    )

    secret_key: SecretStr | None = Field(
        default=None,
        description="S3 secret access key",
    )

    use_ssl: bool = Field(
        default=True,
        description="Use SSL/TLS for S3 connections (set False for local MinIO without TLS)",
    )

    verify_ssl: bool = Field(
        default=True,
        description="Verify SSL certificates (set False for self-signed certs in local MinIO)",
    )

    addressing_style: Literal["auto", "virtual", "path"] = Field(
        default="auto",
        description="S3 addressing style; MinIO usually needs 'path'",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts performed by botocore",
    )

    retry_mode: RetryMode = Field(
        default="standard",
        description="botocore retry mode: standard, adaptive, or legacy",
    )

    timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="S3 connect/read timeout in seconds",
    )

    max_pool_connections: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum number of connections in the connection pool",
    )

    # ──────────────────────────────────────────────────────────────
    # Pre-signed URLs
    # ──────────────────────────────────────────────────────────────

    presigned_url_expiry_seconds: int = Field(
        default=6 * 60 * 60,
        ge=1,
        le=604800,  # 7 days max for SigV4
        description="Download link lifetime in seconds (default 6 hours)",
    )

    presigned_url_scheme: Literal["http", "https"] = Field(
        default="http",
        description="URL scheme of generated download links",
    )

    # ──────────────────────────────────────────────────────────────
    # Fixed payloads
    # ──────────────────────────────────────────────────────────────

    default_object_body: str = Field(
        default="Welcome to Minimal API AWS SDK S3 Development",
        description="Body written by the create-object operation",
    )

    default_object_content_type: str = Field(
        default="text/plain",
        description="Content type written by the create-object operation",
    )

    default_tag_key: str = Field(
        default="test-metadata-key",
        min_length=1,
        max_length=128,
        description="Tag key applied by the tag-object operation",
    )

    default_tag_value: str = Field(
        default="test-metadata-value",
        max_length=256,
        description="Tag value applied by the tag-object operation",
    )

    # ──────────────────────────────────────────────────────────────
    # Service Lifecycle Configuration
    # ──────────────────────────────────────────────────────────────

    startup_require_storage: bool = Field(
        default=False,
        description="Fail application startup if the S3 client cannot be created",
    )

    # ──────────────────────────────────────────────────────────────
    # Validators
    # ──────────────────────────────────────────────────────────────

    @field_validator("endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str | None) -> str | None:
        """Drop trailing slashes so botocore builds clean URLs."""
        if value is None:
            return None
        return value.rstrip("/") or None

    @model_validator(mode="after")
    def _validate_credential_consistency(self) -> StorageSettings:
        """Validate that both credentials are provided together or neither."""
        has_access_key = self.access_key is not None
        has_secret_key = self.secret_key is not None

        if has_access_key != has_secret_key:
            raise ValueError(
                "Both access_key and secret_key must be provided together when using "
                "static credentials. Provide both or neither (for IAM role authentication)."
            )

        return self

    # ──────────────────────────────────────────────────────────────
    # Computed Properties
    # ──────────────────────────────────────────────────────────────

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_static_credentials(self) -> bool:
        """Whether explicit credentials are configured."""
        return self.access_key is not None and self.secret_key is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_custom_endpoint(self) -> bool:
        """Check if configured for MinIO/S3-compatible (has custom endpoint)."""
        return self.endpoint is not None

    # ──────────────────────────────────────────────────────────────
    # Helper Methods
    # ──────────────────────────────────────────────────────────────

    def get_boto3_config(self) -> dict[str, Any]:
        """Get keyword arguments for ``aioboto3.Session().client("s3", ...)``.

        Returns:
            Dictionary with region, SSL settings, endpoint and credentials
            (only when static credentials are configured).
        """
        config: dict[str, Any] = {
            "region_name": self.region,
            "use_ssl": self.use_ssl,
            "verify": self.verify_ssl,
        }

        if self.access_key is not None and self.secret_key is not None:
            config["aws_access_key_id"] = self.access_key.get_secret_value()
            config["aws_secret_access_key"] = self.secret_key.get_secret_value()

        if self.endpoint:
            config["endpoint_url"] = self.endpoint

        return config

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )
