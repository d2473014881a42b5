"""Pydantic schemas for the storage API."""

from datetime import datetime

from pydantic import BaseModel, Field

from storage_api.infra.storage.backends import BucketInfo


class BucketResponse(BaseModel):
    """Bucket descriptor as returned by the provider."""

    name: str = Field(..., description="Bucket name")
    creation_date: datetime | None = Field(None, description="When bucket was created")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "reports",
                    "creation_date": "2024-01-15T10:30:00Z",
                }
            ]
        }
    }

    @classmethod
    def from_info(cls, info: BucketInfo) -> "BucketResponse":
        return cls(name=info.name, creation_date=info.creation_date)
